"""
Credential store: one Account row per email address.

Callers read an Account, mutate it in memory and put it back. Writes are full
overwrites (last writer wins); there is no version check, so two concurrent
requests for the same email can lose an update. That is accepted for a single
person driving each account.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.models.account import Account, SubscriptionTier

logger = logging.getLogger(__name__)


class AccountStore:
    def __init__(self, db: Session):
        self.db = db

    def get(self, email: str) -> Optional[Account]:
        if not email:
            return None
        return self.db.get(Account, email)

    def exists(self, email: str) -> bool:
        return self.get(email) is not None

    def put(self, email: str, account: Account) -> Account:
        if account.email != email:
            raise ValueError(f"Account key mismatch: {email!r} != {account.email!r}")
        stored = self.db.merge(account)
        self.db.commit()
        self.db.refresh(stored)
        logger.debug("Stored account %s (searches=%s)", email, stored.monthly_search_count)
        return stored


def _parse_timestamp(value) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def account_from_legacy_record(email: str, record: dict) -> Account:
    """
    Convert one record of the old key/value export into an Account.

    Legacy shape: subscription_status ("free" | "active"), monthly_searches,
    created_at, last_reset, stripe_customer_id, subscription_id, upgraded_at,
    last_payment. password_hash is an unsalted SHA-256 hex digest, which
    app.utils.auth still accepts and upgrades on the next login.
    """
    if not record.get("password_hash"):
        raise ValueError(f"Legacy record for {email} has no password_hash")

    now = datetime.now(timezone.utc)
    created_at = _parse_timestamp(record.get("created_at")) or now
    tier = SubscriptionTier.PRO if record.get("subscription_status") == "active" else SubscriptionTier.FREE

    return Account(
        email=email,
        password_hash=record["password_hash"],
        subscription_tier=tier.value,
        monthly_search_count=max(int(record.get("monthly_searches") or 0), 0),
        created_at=created_at,
        last_reset_at=_parse_timestamp(record.get("last_reset")) or created_at,
        external_payment_id=record.get("stripe_customer_id"),
        external_subscription_id=record.get("subscription_id"),
        upgraded_at=_parse_timestamp(record.get("upgraded_at")),
        last_payment_at=_parse_timestamp(record.get("last_payment")),
    )
