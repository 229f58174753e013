"""
CLI entry point for the Finance4All MCP server.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from finance4all.auth.firebase import AuthenticatedUser, FirebaseAuthClient
from finance4all.auth.verifier import TokenVerifier
from finance4all.config import Settings, load_settings
from finance4all.core.database import FinanceDatabase
from finance4all.core.exceptions import Finance4AllError
from finance4all.core.seed import seed_database
from finance4all.models.user import UserRole
from finance4all.server import run_server

logger = logging.getLogger("finance4all")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Finance4All MCP Server - Personal finance data through MCP"
    )
    parser.add_argument(
        "--db-url",
        help="SQLAlchemy database URL (default: DATABASE_URL or sqlite:///finance4all.db)",
    )
    parser.add_argument(
        "--env-file",
        help="Path to a .env file (default: .env in the working directory)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the MCP server on stdio (default)")
    identity = serve.add_mutually_exclusive_group()
    identity.add_argument(
        "--id-token",
        help="Firebase ID token of the user the server acts for",
    )
    identity.add_argument(
        "--uid",
        help="Act as this Firebase UID without verifying a token (local development)",
    )
    serve.add_argument(
        "--role",
        choices=[role.value for role in UserRole],
        default=UserRole.USER.value,
        help="Role for --uid (default: USER)",
    )

    subparsers.add_parser("seed", help="Create the schema and load sample data")
    return parser


def resolve_caller(args: argparse.Namespace, settings: Settings) -> Optional[AuthenticatedUser]:
    """Work out which user the server acts for, if any."""
    if getattr(args, "uid", None):
        logger.warning(f"Acting as unverified identity {args.uid}")
        return AuthenticatedUser(uid=args.uid, role=UserRole(args.role))

    if getattr(args, "id_token", None):
        with FirebaseAuthClient.from_settings(settings) as client:
            caller = TokenVerifier(client).authenticate(f"Bearer {args.id_token}")
        if caller is None:
            logger.warning("ID token rejected; serving unauthenticated")
        return caller

    logger.info("No identity given; only the hello tool will work")
    return None


def seed(database: FinanceDatabase) -> int:
    try:
        result = seed_database(database)
    except Exception:
        logger.exception("Seed failed")
        return 1
    logger.info(
        f"Seeded {len(result.categories)} categories and "
        f"{len(result.accounts)} accounts for {result.user.email}"
    )
    return 0


def main() -> None:
    """Main entry point for the CLI."""
    args = build_parser().parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,  # MCP uses stdout for protocol, so log to stderr
    )

    settings = load_settings(args.env_file)
    database = FinanceDatabase(args.db_url or settings.database_url)

    if args.command == "seed":
        exit_code = seed(database)
        database.close()
        sys.exit(exit_code)

    try:
        database.create_schema()
        caller = resolve_caller(args, settings)
        asyncio.run(run_server(database, caller))
    except KeyboardInterrupt:
        logging.info("Server stopped by user")
        sys.exit(0)
    except Finance4AllError as e:
        logging.error(f"Startup failed [{e.code}]: {e}")
        sys.exit(1)
    except Exception as e:
        logging.exception(f"Server error: {e}")
        sys.exit(1)
    finally:
        database.close()


if __name__ == "__main__":
    main()
