"""
Operator command line for the offline event queue.

Usage:
    event-relay status
    event-relay flush --api-key phc_xxx
    event-relay send --api-key phc_xxx --event app_opened --properties '{"plan": "pro"}'

Options --data-dir and --host override EVENT_RELAY_DATA_DIR and
EVENT_RELAY_INGEST_HOST for a single invocation.
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from pydantic import ValidationError

from event_relay.config.settings import Settings
from event_relay.context import RelayContext
from event_relay.exceptions import StorageInitializationError
from event_relay.models.request import BatchPayload
from event_relay.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="event-relay",
        description="Inspect and drain the offline telemetry event queue"
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Directory holding the queue database (default: settings)"
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Ingestion host base URL (default: settings)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Print queue statistics as JSON")

    flush_parser = subparsers.add_parser("flush", help="Run one flush pass")
    flush_parser.add_argument("--api-key", required=True, help="Ingestion API key")

    send_parser = subparsers.add_parser("send", help="Submit a one-event batch")
    send_parser.add_argument("--api-key", required=True, help="Ingestion API key")
    send_parser.add_argument("--event", required=True, help="Event name")
    send_parser.add_argument(
        "--properties",
        type=str,
        default="{}",
        help="Event properties as a JSON object (default: {})"
    )

    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.data_dir:
        overrides["data_dir"] = args.data_dir
    if args.host:
        overrides["ingest_host"] = args.host
    return Settings(**overrides)


async def run_command(
    args: argparse.Namespace,
    config: Settings,
    payload: Optional[BatchPayload] = None
) -> dict:
    async with RelayContext(config) as context:
        if args.command == "status":
            stats = await context.stats()
            return stats.model_dump()

        if args.command == "flush":
            report = await context.flush(args.api_key)
            return report.model_dump()

        result = await context.submit_batch(payload.events, payload.api_key)
        return result.model_dump()


def parse_send_payload(args: argparse.Namespace) -> BatchPayload:
    """
    Raises:
        ValueError: If --properties is not a JSON object or the event is invalid
    """
    try:
        properties = json.loads(args.properties)
    except json.JSONDecodeError as e:
        raise ValueError(f"--properties is not valid JSON: {e}") from e
    if not isinstance(properties, dict):
        raise ValueError("--properties must be a JSON object")

    return BatchPayload(
        events=[{"event": args.event, "properties": properties}],
        api_key=args.api_key
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_settings(args)
    except ValidationError as e:
        parser.error(str(e))

    configure_logging(config.log_level, stream=sys.stderr)

    payload = None
    if args.command == "send":
        try:
            payload = parse_send_payload(args)
        except ValueError as e:
            parser.error(str(e))

    try:
        output = asyncio.run(run_command(args, config, payload))
    except StorageInitializationError as e:
        logger.error("Cannot open event queue", error=str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
