#!/usr/bin/env python3
"""
Todo RBAC Server - Setup Script

This script initializes the server database for deployment:
1. Creates the database schema
2. Seeds the permission vocabulary and default roles
3. Creates the default admin user on first run

Settings (database URL, JWT secret, admin email) are read from the same
TODO_RBAC_* environment variables the server uses.

Usage:
    python setup_server.py [--yes] [--database-url URL]
"""

import argparse
import sys
from pathlib import Path

# Ensure we can import from the same directory
sys.path.insert(0, str(Path(__file__).parent))

from config import GetSettings
from errors import ConfigurationError
from managers.credential_manager import CredentialManager
from managers.database_manager import DatabaseManager


def print_header():
    """Print script header"""
    print("=" * 70)
    print("Todo RBAC Server - Setup Script")
    print("=" * 70)
    print()


def print_section(title):
    """Print section header"""
    print()
    print("-" * 70)
    print(f"  {title}")
    print("-" * 70)


def initialize_database(settings):
    """
    Initialize the database with schema and default data

    Args:
        settings: Application settings

    Returns:
        str or None: Admin password if created, None otherwise
    """
    print_section("Database Initialization")
    print(f"-> Database: {settings.DATABASE_URL}")
    print()

    credential_manager = CredentialManager(
        secret_key=settings.ResolveJwtSecret(),
        algorithm=settings.JWT_ALGORITHM,
        expiration_hours=settings.JWT_EXPIRATION_HOURS,
        bcrypt_rounds=settings.BCRYPT_ROUNDS
    )

    db_manager = DatabaseManager(settings.DATABASE_URL)
    try:
        admin_password = db_manager.InitializeDatabase(credential_manager, settings.ADMIN_EMAIL)
    finally:
        db_manager.Dispose()

    print("[OK] Database initialization complete!")
    return admin_password


def print_admin_credentials(settings, password):
    """
    Print admin credentials prominently

    Args:
        settings: Application settings
        password: Generated admin password
    """
    print()
    print("!" * 70)
    print("!  IMPORTANT: SAVE THESE CREDENTIALS - PASSWORD SHOWN ONLY ONCE!")
    print("!" * 70)
    print()
    print(f"  Admin Email:    {settings.ADMIN_EMAIL}")
    print(f"  Admin Password: {password}")
    print()
    print("  -> Use POST /api/auth/change_password to change it after first login")


def main(argv=None):
    """Main setup script entry point"""
    parser = argparse.ArgumentParser(
        description="Initialize the Todo RBAC Server database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        "--yes",
        action="store_true",
        help="Run without asking for confirmation"
    )

    parser.add_argument(
        "--database-url",
        type=str,
        help="SQLAlchemy database URL (default: TODO_RBAC_DATABASE_URL)"
    )

    args = parser.parse_args(argv)

    print_header()

    if not args.yes:
        try:
            response = input("Continue with setup? (Y/n): ")
            if response.lower() == 'n':
                print("\nSetup cancelled.")
                return 0
        except KeyboardInterrupt:
            print("\n\nSetup cancelled.")
            return 0

    settings = GetSettings()
    if args.database_url:
        settings = settings.model_copy(update={"DATABASE_URL": args.database_url})

    try:
        admin_password = initialize_database(settings)
    except ConfigurationError as e:
        print(f"\n[ERROR] {str(e)}")
        return 1
    except Exception as e:
        print(f"\n[ERROR] Setup failed during database initialization: {str(e)}")
        return 1

    if admin_password:
        print_admin_credentials(settings, admin_password)
    else:
        print()
        print("  Database already contained users - no new admin account created.")
        print("  Default roles were reseeded with their default permissions.")

    print()
    print("=" * 70)
    print("Setup complete! Start the server with: python server.py")
    print("=" * 70)
    return 0


if __name__ == "__main__":
    sys.exit(main())
