"""
Command line interface for firenews.

    firenews serve                 Run the JSON API
    firenews fetch <category>      Aggregate one category and print it as JSON
    firenews categories            List configured categories
"""

import argparse
import json
import sys
from typing import Optional, Sequence

from firenews.config import get_config, load_config_from_yaml
from firenews.core.factories import create_aggregator, create_catalog
from firenews.exceptions import FireNewsError
from firenews.logger import get_logger, setup_logger
from firenews.web.serializers import news_item_to_dict

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="firenews", description="Fire and emergency news aggregator")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING, ...)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the JSON API")
    serve.add_argument("--host", help="Bind address (default: WEB_HOST)")
    serve.add_argument("--port", type=int, help="Port (default: WEB_PORT)")

    fetch = subparsers.add_parser("fetch", help="Aggregate one category and print it as JSON")
    fetch.add_argument("category", help="Category name")
    fetch.add_argument("--include", help="Include pattern for filtered sources")

    subparsers.add_parser("categories", help="List configured categories")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    config = load_config_from_yaml(args.config) if args.config else get_config()
    setup_logger(config.logging, level=args.log_level)

    try:
        if args.command == "serve":
            from firenews.web.app import create_app

            # Filtered sources call back into this server
            if args.port:
                config.web.port = args.port
            app = create_app(config)
            app.run(
                host=args.host or config.web.host,
                port=config.web.port,
                debug=config.web.debug,
            )

        elif args.command == "fetch":
            result = create_aggregator(config).aggregate(args.category, include=args.include)
            items = [news_item_to_dict(item, config.web.expose_source_key) for item in result.items]
            json.dump({"news": items}, sys.stdout, ensure_ascii=False, indent=2)
            sys.stdout.write("\n")

        elif args.command == "categories":
            for category in create_catalog(config):
                print(f"{category.name}\t{len(category.sources)} sources\t{category.description}")

    except FireNewsError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
