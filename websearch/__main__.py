"""
Command-line search: ``python -m websearch "query" [--count N] [--provider NAME]``.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import WebSearchConfig, load_env_file
from .tool import build_web_search_tools


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="websearch",
        description="Search the web through the configured provider chain.",
    )
    parser.add_argument("query", help="Search query string.")
    parser.add_argument("-n", "--count", type=int, default=None, help="Number of results (1-20, default 5).")
    parser.add_argument("-p", "--provider", default=None, help="Force a single provider: google, brave, xai.")
    parser.add_argument("--order", default=None, help="Comma-separated provider order, e.g. brave,google.")
    parser.add_argument("--env-file", default=None, help="Path to a .env file (default: ./.env).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_env_file(args.env_file)

    config = WebSearchConfig.from_env()
    if args.order:
        config = config.model_copy(
            update={"provider_order": WebSearchConfig(provider_order=args.order.split(",")).provider_order}
        )

    server = build_web_search_tools(config)
    tool_args = {"query": args.query}
    if args.count is not None:
        tool_args["count"] = args.count
    if args.provider:
        tool_args["provider"] = args.provider

    result = server.tools[0].handler(tool_args)
    stream = sys.stderr if result.is_error else sys.stdout
    print(result.text, file=stream)
    return 1 if result.is_error else 0


if __name__ == "__main__":
    sys.exit(main())
