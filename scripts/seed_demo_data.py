"""Create the tables and insert the demo careers and accounts.

Run from the project root: ``python scripts/seed_demo_data.py``.
"""
import sys
from pathlib import Path

# project root on sys.path so the package imports without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from classconnect.config import get_settings
from classconnect.db import Database
from classconnect.seed import DEMO_PASSWORD, DEMO_USERS, seed_demo_data


def main():
    print("=" * 50)
    print("ClassConnect demo data")
    print("=" * 50)

    database = Database.from_settings(get_settings())
    database.create_all()
    try:
        with database.session_scope() as db:
            counts = seed_demo_data(db)
    finally:
        database.dispose()

    print(f"\n  careers created: {counts['careers']}")
    print(f"  users created:   {counts['users']}")
    print(f"\nDemo accounts (password: {DEMO_PASSWORD}):")
    for user in DEMO_USERS:
        print(f"  {user['role'].value:<8} {user['email']}")


if __name__ == "__main__":
    main()
