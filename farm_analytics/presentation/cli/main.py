"""CLI interface for the farm cost and productivity aggregators."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from ...application.services.command_dispatcher import CostCommand, ProductivityCommand
from ..wiring import build_dispatchers, load_repository
from config.settings import DATA_DIR, LOG_LEVEL

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Farm cost and productivity analytics")
    parser.add_argument(
        "--data-dir", type=str, default=str(DATA_DIR), help="Directory with the farm CSV files"
    )
    parser.add_argument("--log-level", type=str, default=LOG_LEVEL, help="Logging level")
    subparsers = parser.add_subparsers(dest="aggregator", required=True)

    for name, commands, help_text in (
        ("costs", CostCommand, "Cost aggregation commands"),
        ("productivity", ProductivityCommand, "Productivity aggregation commands"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("kind", choices=[c.value for c in commands], help="Command kind")
        sub.add_argument(
            "--payload", type=str, default="{}", help='JSON payload, e.g. \'{"parcel_id": "p1"}\''
        )
        sub.add_argument("--output", type=str, default=None, help="Write the JSON result to a file")

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    try:
        payload = json.loads(args.payload)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON payload: {e}")
        sys.exit(2)

    try:
        dispatchers = build_dispatchers(load_repository(args.data_dir))
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}")
        sys.exit(1)

    result = asyncio.run(
        dispatchers[args.aggregator].dispatch({"kind": args.kind, "payload": payload})
    )
    text = json.dumps(result, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        logger.info(f"Result written to {args.output}")
    else:
        print(text)

    if not result["ok"]:
        sys.exit(1)


if __name__ == "__main__":
    main()
