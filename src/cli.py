"""CLI entry point for the IPTV catalog."""

import argparse
import asyncio
import sys
from pathlib import Path


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="iptv",
        description="IPTV catalog - viewing history, recommendations and program guide over MCP",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the MCP server")
    serve_parser.add_argument(
        "--config-dir",
        type=str,
        help="Path to config directory",
    )

    # seed command
    seed_parser = subparsers.add_parser("seed", help="Load demo data into an empty database")
    seed_parser.add_argument(
        "--config-dir",
        type=str,
        help="Path to config directory",
    )
    seed_parser.add_argument(
        "--db-path",
        type=str,
        help="Database file (overrides database.path from config)",
    )

    # config command
    config_parser = subparsers.add_parser("config", help="Configuration utilities")
    config_subparsers = config_parser.add_subparsers(dest="config_action", help="Config action")

    # config validate
    validate_parser = config_subparsers.add_parser("validate", help="Validate configuration")
    validate_parser.add_argument(
        "--config-dir",
        type=str,
        help="Path to config directory",
    )

    # config init
    init_parser = config_subparsers.add_parser("init", help="Create example config files")
    init_parser.add_argument(
        "--config-dir",
        type=str,
        default="./config",
        help="Path to config directory (default: ./config)",
    )

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "serve":
        from main import main as serve_main
        asyncio.run(serve_main(args.config_dir))

    elif args.command == "seed":
        seeded = asyncio.run(run_seed(args))
        print("✓ Demo data loaded" if seeded else "⚠ Database already has data, nothing to do")

    elif args.command == "config":
        if args.config_action is None:
            config_parser.print_help()
            sys.exit(1)
        if not run_config_command(args):
            sys.exit(1)


async def run_seed(args: argparse.Namespace) -> bool:
    """Seed the configured database."""
    from admin import seed_database
    from config import load_config
    from main import configure_logging
    from persistence import Database

    config = load_config(Path(args.config_dir) if args.config_dir else None)
    configure_logging(config.service.log_level)

    database = Database(args.db_path or config.database.path)
    await database.initialize()
    try:
        return await seed_database(database.unit_of_work())
    finally:
        await database.close()


def run_config_command(args: argparse.Namespace) -> bool:
    """Run config commands."""
    if args.config_action == "validate":
        from admin import validate_config
        return validate_config(args.config_dir)

    elif args.config_action == "init":
        from admin import init_config
        init_config(args.config_dir)

    return True


if __name__ == "__main__":
    main()
