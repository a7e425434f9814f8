import argparse
import json
import sys

from order_images.entrypoints.handler import handle_request
from order_images.entrypoints.settings import ConfigurationError, load_config
from order_images.shared.logging import configure_logging


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="order-image-bundler",
        description="Bundle product images of open Shopify orders into a ZIP download.",
    )
    modes = parser.add_subparsers(dest="mode", required=True)

    by_date = modes.add_parser("date", help="orders created on one UTC day")
    by_date.add_argument("date", help="calendar day, YYYY-MM-DD")

    by_range = modes.add_parser("range", help="orders within an order-number range")
    by_range.add_argument("start", type=int)
    by_range.add_argument("end", type=int)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.mode == "date":
        body = {"type": "date", "date": args.date}
    else:
        body = {"type": "order_range", "start": args.start, "end": args.end}

    try:
        config = load_config()
    except ConfigurationError:
        config = None  # handle_request reports it
    else:
        configure_logging(config.LOG_LEVEL)

    response = handle_request("POST", json.dumps(body), config=config)
    print(json.dumps(response.body, indent=2))
    return 0 if response.status_code == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
