"""Bulk-load employees into the ``users`` collection.

Usage:
    python scripts/seed_employees.py employees.csv [--reset-auth]

The CSV needs ``name,paysheet_number,email`` columns. New employees are
created awaiting first-login setup. With ``--reset-auth`` existing employees
are put back into that state (password cleared, email refreshed).
"""
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

import argparse
import asyncio
import csv
from typing import Dict, Iterable

from leave_tracker.constants.constants import USERS_COLLECTION, UserRole
from leave_tracker.core.config import settings
from leave_tracker.core.database import DocumentStoreManager
from leave_tracker.models.user import UserDocument, new_user_document


def read_rows(path: str) -> list:
    with open(path, newline="", encoding="utf-8") as handle:
        return [
            {k.strip(): (v or "").strip() for k, v in row.items() if k}
            for row in csv.DictReader(handle)
        ]


async def load_employees(store: DocumentStoreManager, rows: Iterable[Dict[str, str]], reset_auth: bool = False) -> Dict[str, int]:
    """Insert unknown employees and optionally reset known ones to setup-required."""
    users = await store.collection(USERS_COLLECTION)
    counts = {"created": 0, "reset": 0, "skipped": 0}

    for row in rows:
        name, paysheet_number = row.get("name"), row.get("paysheet_number")
        email = (row.get("email") or "").lower() or None
        if not name or not paysheet_number:
            print(f"⚠️ Skipping row without name or paysheet number: {row}")
            counts["skipped"] += 1
            continue

        existing = await users.find_one({"paysheet_number": paysheet_number, "role": UserRole.employee.value})
        if existing is None:
            await users.insert_one(new_user_document(name, paysheet_number=paysheet_number, email=email))
            print(f"✅ Added: {name} ({paysheet_number})")
            counts["created"] += 1
        elif reset_auth:
            changes = {"first_login": True, "password": None}
            if email:
                changes["email"] = email
            await users.update_one({"_id": existing["_id"]}, UserDocument.stamp_update(changes))
            print(f"🔄 Reset: {name} ({paysheet_number})")
            counts["reset"] += 1
        else:
            counts["skipped"] += 1

    return counts


async def main(path: str, reset_auth: bool):
    store = DocumentStoreManager(settings)
    await store.init()
    if store.is_ephemeral:
        print("❌ MONGODB_URI is not set or unreachable; refusing to seed an in-memory store")
        return 1
    try:
        counts = await load_employees(store, read_rows(path), reset_auth=reset_auth)
        print(f"✅ Done: {counts['created']} created, {counts['reset']} reset, {counts['skipped']} skipped")
        return 0
    finally:
        await store.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Bulk-load employees")
    parser.add_argument("csv_path")
    parser.add_argument("--reset-auth", action="store_true")
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.csv_path, args.reset_auth)))
