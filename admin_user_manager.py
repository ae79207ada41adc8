#!/usr/bin/env python3
"""
Admin User Manager Script
=========================

Manage staff accounts from the command line.

Usage:
    python admin_user_manager.py list
    python admin_user_manager.py create <p_number> <name> <password> [role] [email]
    python admin_user_manager.py reset-password <p_number> <new_password>
    python admin_user_manager.py import-staff <csv_path>
"""

import csv
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import generate_password_hash

from app import create_app
from extensions import db
from models import ROLES, STAFF_ROLE, User

logger = logging.getLogger(__name__)


def list_users():
    """List all staff accounts."""
    users = User.query.order_by(User.name).all()
    if not users:
        print("No users found in the database.")
        return users

    print("=" * 80)
    print("USER LIST")
    print("=" * 80)
    for i, user in enumerate(users, 1):
        print(f"{i:3d}. P Number: {user.p_number:12s} | Name: {user.name:25s} | Role: {user.role:6s} | Email: {user.email or 'N/A'}")
    print(f"\nTotal users: {len(users)}")
    return users


def create_user(p_number, name, password, role=STAFF_ROLE, email=None):
    """Create a staff account. Returns the user, or None if it could not be created."""
    if role not in ROLES:
        print(f"Unknown role '{role}'. Expected one of: {', '.join(ROLES)}")
        return None

    if User.query.filter_by(p_number=p_number).first():
        print(f"User '{p_number}' already exists.")
        return None

    user = User(
        p_number=p_number,
        name=name,
        email=email,
        role=role,
        password_hash=generate_password_hash(password),
    )
    try:
        db.session.add(user)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error creating user {p_number}: {e}")
        return None

    print(f"User '{p_number}' created successfully with role '{role}'")
    return user


def reset_password(p_number, new_password):
    """Reset a user's password."""
    user = User.query.filter_by(p_number=p_number).first()
    if not user:
        print(f"User '{p_number}' not found.")
        return False

    user.password_hash = generate_password_hash(new_password)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error resetting password for {p_number}: {e}")
        return False

    print(f"Password reset successfully for user '{p_number}'")
    return True


def import_staff(csv_path, default_password):
    """
    Import staff from a CSV of `P number, name[, email]` rows. Existing P
    numbers are skipped. Returns (created, skipped).
    """
    created = skipped = 0
    with open(csv_path, newline='', encoding='utf-8-sig') as handle:
        for row in csv.reader(handle):
            if not row or not row[0].strip() or row[0].strip().lower() in ('p number', 'p_number', 'pnumber'):
                continue
            p_number = row[0].strip()
            name = row[1].strip() if len(row) > 1 and row[1].strip() else p_number
            email = row[2].strip() if len(row) > 2 and row[2].strip() else None

            if create_user(p_number, name, default_password, STAFF_ROLE, email):
                created += 1
            else:
                skipped += 1

    print(f"\nImported {created} staff, skipped {skipped}.")
    return created, skipped


def show_help():
    """Show help information."""
    print("""
Admin User Manager Script
=========================

Usage:
    python admin_user_manager.py <command> [arguments]

Commands:
    list                                              - List all users
    create <p_number> <name> <password> [role] [email] - Create a user (role: staff or admin)
    reset-password <p_number> <password>              - Reset a user's password
    import-staff <csv_path>                           - Import staff from CSV (P number, name, email)
    help                                              - Show this help

Examples:
    python admin_user_manager.py create P00166224 "RJ Ramautar" 'S3cure!pass' admin
    python admin_user_manager.py import-staff data/staff.csv
""")


def main(argv=None):
    """Main function."""
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        show_help()
        return 1

    command = argv[0].lower()
    app = create_app()

    with app.app_context():
        if command == 'help':
            show_help()
        elif command == 'list':
            list_users()
        elif command == 'create':
            if len(argv) < 4:
                print("Usage: python admin_user_manager.py create <p_number> <name> <password> [role] [email]")
                return 1
            role = argv[4] if len(argv) > 4 else STAFF_ROLE
            email = argv[5] if len(argv) > 5 else None
            return 0 if create_user(argv[1], argv[2], argv[3], role, email) else 1
        elif command == 'reset-password':
            if len(argv) < 3:
                print("Usage: python admin_user_manager.py reset-password <p_number> <new_password>")
                return 1
            return 0 if reset_password(argv[1], argv[2]) else 1
        elif command == 'import-staff':
            if len(argv) < 2:
                print("Usage: python admin_user_manager.py import-staff <csv_path>")
                return 1
            import_staff(argv[1], app.config['DEFAULT_STAFF_PASSWORD'])
        else:
            print(f"Unknown command: {command}")
            show_help()
            return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
