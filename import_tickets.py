#!/usr/bin/env python3
"""
Import legacy IT tickets from the spreadsheet export.

Usage:
    python import_tickets.py <csv_path>
"""

import sys

from app import create_app
from services.ticket_import import import_tickets_from_csv


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print(__doc__)
        return 1

    app = create_app()
    with app.app_context():
        summary = import_tickets_from_csv(argv[0])

    print("=" * 60)
    print("Import Summary:")
    print(f"   Total records: {summary['total']}")
    print(f"   Imported: {summary['imported']}")
    print(f"   Skipped: {summary['skipped']}")
    print(f"   Errors: {summary['errors']}")
    return 0 if summary['errors'] == 0 else 1


if __name__ == '__main__':
    sys.exit(main())
