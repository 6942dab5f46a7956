# src/drystore_hub/scripts/init_db.py
"""Create the schema and seed the first administrator."""
from __future__ import annotations

import argparse
import logging
import sys

from drystore_hub.core.logging import configure_logging
from drystore_hub.core.settings import settings
from drystore_hub.db.session import create_tables, session_scope
from drystore_hub.services import user_service

logger = logging.getLogger(__name__)


def seed_admin(email: str, password: str, display_name: str) -> bool:
    """Create an admin account unless the email is taken. Returns True on create."""
    with session_scope() as db:
        existing = user_service.get_user_by_email(db, email)
        if existing is not None:
            if not existing.is_admin:
                user_service.set_admin(db, existing, True)
                logger.info("Promoted existing user %s to admin", email)
            return False
        user_service.create_user(
            db,
            email=email,
            password=password,
            display_name=display_name,
            is_admin=True,
        )
    logger.info("Created admin %s", email)
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Initialize the DryStore Hub database")
    parser.add_argument("--admin-email", help="Email of the administrator to seed")
    parser.add_argument("--admin-password", help="Password for the seeded administrator")
    parser.add_argument("--admin-name", default="Administrador", help="Display name for the administrator")
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)
    create_tables()
    logger.info("Tables ready on %s", settings.effective_database_url)

    if args.admin_email:
        if not args.admin_password or len(args.admin_password) < settings.password_min_length:
            parser.error(f"--admin-password must be at least {settings.password_min_length} characters")
        seed_admin(args.admin_email, args.admin_password, args.admin_name)
    return 0


if __name__ == "__main__":
    sys.exit(main())
