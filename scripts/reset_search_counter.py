#!/usr/bin/env python3
"""
Reset the monthly search counter for one account (same as the "reset" action).

  python scripts/reset_search_counter.py someone@example.com
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv
load_dotenv(project_root / ".env")

from app.core.errors import NotFound
from app.db.session import SessionLocal
from app.services.account_service import reset_counter
from app.services.credential_store import AccountStore


def main() -> None:
    parser = argparse.ArgumentParser(description="Reset an account's monthly search counter")
    parser.add_argument("email")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        account = reset_counter(AccountStore(db), args.email)
    except NotFound:
        print(f"ERROR: no account for {args.email}")
        sys.exit(1)
    finally:
        db.close()

    print(f"Search counter reset for {account.email} (last reset {account.last_reset_at})")


if __name__ == "__main__":
    main()
