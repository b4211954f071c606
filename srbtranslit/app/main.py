#!/usr/bin/env python3

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from .domains import hostname, registrable_domain
from .storage.backends import DatabaseStore
from .storage.container import get_stores
from .translit import Direction, transliterate, transliterate_html
from .utils.config import get_config, load_config
from .utils.logger import setup_logging

DIRECTIONS = [direction.value for direction in Direction]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="srbtranslit",
        description="Transliterate between Serbian Cyrillic and Latin and manage per-domain rules.",
    )
    parser.add_argument("--config", help="Path to a TOML config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    text = subparsers.add_parser("text", help="Transliterate text given on the command line")
    text.add_argument("--direction", choices=DIRECTIONS, default="cyr_to_lat")
    text.add_argument("words", nargs="+")

    html = subparsers.add_parser("html", help="Transliterate the text of an HTML file")
    html.add_argument("--direction", choices=DIRECTIONS, default="cyr_to_lat")
    html.add_argument("path", type=Path)
    html.add_argument("-o", "--output", type=Path)

    rules = subparsers.add_parser("rules", help="Manage remembered domains")
    actions = rules.add_subparsers(dest="action", required=True)
    actions.add_parser("list", help="Show remembered domains")
    set_rule = actions.add_parser("set", help="Remember a domain")
    set_rule.add_argument("target", help="URL or hostname")
    set_rule.add_argument("--direction", choices=DIRECTIONS, default="lat_to_cyr")
    remove_rule = actions.add_parser("remove", help="Forget a domain")
    remove_rule.add_argument("target", help="URL or hostname")

    return parser


def _domain_for(target: str) -> Optional[str]:
    """Registrable domain of a URL or a bare host such as ``www.example.com:8080/news``."""
    target = target.strip()
    # A network-path reference parses a bare host with its port and path split off
    host = hostname(target if "://" in target else f"//{target}")
    return registrable_domain(host, get_config().domains.known_second_level)


async def run_rules(args: argparse.Namespace) -> int:
    stores = get_stores()
    try:
        if args.action == "list":
            for domain, rule in (await stores.rules.load()).items():
                print(f"{domain}\t{rule.direction.value}")
            return 0

        domain = _domain_for(args.target)
        if not domain:
            print(f"Not a usable host: {args.target}", file=sys.stderr)
            return 2

        if args.action == "set":
            rule = await stores.rules.upsert(domain, args.direction)
            print(f"{domain}\t{rule.direction.value}")
            return 0

        if not await stores.rules.remove(domain):
            print(f"No rule for {domain}", file=sys.stderr)
            return 1
        return 0
    finally:
        if isinstance(stores.backend, DatabaseStore):
            await stores.backend.close()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    load_config(args.config)
    logger = setup_logging("DEBUG" if args.verbose else None)

    try:
        if args.command == "text":
            print(transliterate(" ".join(args.words), Direction(args.direction)))
            return 0

        if args.command == "html":
            markup = args.path.read_text(encoding="utf-8")
            result = transliterate_html(markup, Direction(args.direction))
            if args.output:
                args.output.write_text(result, encoding="utf-8")
            else:
                sys.stdout.write(result)
            return 0

        return asyncio.run(run_rules(args))
    except KeyboardInterrupt:
        return 130
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
