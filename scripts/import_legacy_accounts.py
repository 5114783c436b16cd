#!/usr/bin/env python3
"""
Import accounts from the old key/value store export.

The export is a JSON object mapping email -> stored user record. Emails that
already exist in the database are skipped, never overwritten.

Run from project root with DATABASE_URL set (or .env):
  python scripts/import_legacy_accounts.py users_export.json
  python scripts/import_legacy_accounts.py users_export.json --dry-run
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv
load_dotenv(project_root / ".env")

from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.services.credential_store import AccountStore, account_from_legacy_record


def import_records(store: AccountStore, records: dict, dry_run: bool = False) -> dict:
    counts = {"imported": 0, "skipped": 0, "invalid": 0}
    for email, record in records.items():
        if isinstance(record, str):
            # KV exports keep each value as a JSON string
            record = json.loads(record)
        if store.exists(email):
            print(f"  skip {email}: already exists")
            counts["skipped"] += 1
            continue
        try:
            account = account_from_legacy_record(email, record)
        except ValueError as e:
            print(f"  invalid {email}: {e}")
            counts["invalid"] += 1
            continue
        if not dry_run:
            store.put(email, account)
        counts["imported"] += 1
    return counts


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("export_file", type=Path, help="JSON export: {email: record}")
    parser.add_argument("--dry-run", action="store_true", help="Validate records without writing")
    args = parser.parse_args()

    records = json.loads(args.export_file.read_text(encoding="utf-8"))
    if not isinstance(records, dict):
        print("ERROR: export must be a JSON object keyed by email")
        sys.exit(1)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        counts = import_records(AccountStore(db), records, dry_run=args.dry_run)
    finally:
        db.close()

    prefix = "[dry run] " if args.dry_run else ""
    print(f"{prefix}Imported {counts['imported']}, skipped {counts['skipped']}, invalid {counts['invalid']}")


if __name__ == "__main__":
    main()
