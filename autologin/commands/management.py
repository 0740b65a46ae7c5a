#!/usr/bin/env python3
"""
Management CLI commands for the autologin application.

Usage:
    python -m autologin.commands.management <command> [args...]

Commands:
    sweep                     - Remove expired autologin tokens
    issue <user_id> [path]    - Issue an autologin link for a user
    help                      - Show this help message

Examples:
    python -m autologin.commands.management sweep
    python -m autologin.commands.management issue 42 /dashboard
"""

import asyncio
import sys
import logging

from autologin.commands.sweep_expired_tokens import sweep_expired_tokens
from autologin.core.config import settings
from autologin.core.database import AsyncSessionLocal
from autologin.core.exceptions import AutologinError
from autologin.repositories.unit_of_work import SqlAlchemyUnitOfWork
from autologin.services.autologin_service import AutologinService
from autologin.services.link_builder import StarletteLinkBuilder

# Configure logging for CLI
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)


async def main():
    """Main entry point for management commands."""
    if len(sys.argv) < 2:
        print_help()
        sys.exit(1)

    command = sys.argv[1].lower()

    if command == "help" or command == "--help" or command == "-h":
        print_help()
        return

    elif command == "sweep":
        await handle_sweep()

    elif command == "issue":
        await handle_issue()

    else:
        print(f"Unknown command: {command}")
        print_help()
        sys.exit(1)


async def handle_sweep():
    """Handle the sweep command."""
    print(f"🔄 Removing autologin tokens older than {settings.AUTOLOGIN_LIFETIME} minutes...")

    results = await sweep_expired_tokens()

    if not results["success"]:
        print(f"❌ Sweep failed: {'; '.join(results['errors'])}")
        sys.exit(1)

    print("✅ Sweep completed!")
    print(f"   Deleted: {results['total_deleted']}")
    print(f"   Cutoff: {results['cutoff_date']}")


async def handle_issue():
    """Handle the issue command."""
    if len(sys.argv) < 3:
        print("❌ Error: issue requires a user ID")
        print("Usage: python -m autologin.commands.management issue <user_id> [path]")
        sys.exit(1)

    try:
        user_id = int(sys.argv[2])
    except ValueError:
        print(f"❌ Error: '{sys.argv[2]}' is not a valid user ID (must be an integer)")
        sys.exit(1)

    path = sys.argv[3] if len(sys.argv) > 3 else None

    # Routes are needed to build the redemption URL
    from autologin.main import app

    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUnitOfWork(session)
        service = AutologinService(
            uow,
            StarletteLinkBuilder(app, settings.APP_DOMAIN),
            settings.autologin_config(),
        )

        try:
            user = await uow.users.get_by_id(user_id)
            if not user:
                print(f"❌ Error: user {user_id} does not exist")
                sys.exit(1)

            url = await service.issue(user, path)
        except AutologinError as e:
            print(f"❌ Failed to issue autologin link: {e}")
            sys.exit(1)

    print(f"✅ Autologin link for user {user_id}:")
    print(f"   {url}")


def print_help():
    """Print help message."""
    print(__doc__)


if __name__ == "__main__":
    asyncio.run(main())
