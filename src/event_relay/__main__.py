import sys

from event_relay.cli import main

sys.exit(main())
