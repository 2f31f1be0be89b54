"""Command-line interface for signon."""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict

from signon import __version__


async def _init_db() -> None:
    from signon.database.connection import close_db, create_tables, init_db

    await init_db()
    try:
        await create_tables()
    finally:
        await close_db()


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Signon - Google One Tap, Google and GitHub sign-in"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "providers", help="Print the sign-in buttons for the current configuration"
    )
    subparsers.add_parser("init-db", help="Create the database tables")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "providers":
        from signon.auth.providers import get_provider_map

        print(json.dumps([asdict(p) for p in get_provider_map()], indent=2))
        return 0

    if args.command == "init-db":
        asyncio.run(_init_db())
        print("Database tables created.")
        return 0

    return 1


if __name__ == "__main__":
    sys.exit(main())
