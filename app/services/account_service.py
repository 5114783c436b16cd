"""
Account lifecycle: registration, login, counter reset, upgrade and payment confirmations.

State per email: nonexistent -> active(free) -> active(pro). Pro is entered only
through a payment confirmation and is never reverted here.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from app.core.errors import AlreadyExists, InvalidCredentials, InvalidInput, NotFound
from app.core.plan_limits import needs_reset
from app.models.account import Account, SubscriptionTier
from app.services.credential_store import AccountStore
from app.services.payments import StripePayments
from app.utils.auth import hash_password, verify_and_update

logger = logging.getLogger(__name__)

CREDENTIALS_REQUIRED = "Email and password required"

PUBLIC_FIELDS = (
    "email",
    "subscription_tier",
    "monthly_search_count",
    "created_at",
    "last_reset_at",
    "external_payment_id",
    "external_subscription_id",
    "upgraded_at",
    "last_payment_at",
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def public_view(account: Account) -> dict:
    """Account as returned to callers. password_hash is never included."""
    view = {}
    for field in PUBLIC_FIELDS:
        value = getattr(account, field)
        view[field] = _iso(value) if isinstance(value, datetime) else value
    return view


def apply_monthly_reset(account: Account, now: Optional[datetime] = None) -> bool:
    """Roll the monthly counter over if the calendar month changed. Returns True when it did."""
    now = now or utcnow()
    if not needs_reset(now, account.last_reset_at):
        return False
    logger.info(
        "Monthly search reset for %s (was %s, last reset %s)",
        account.email, account.monthly_search_count, account.last_reset_at,
    )
    account.monthly_search_count = 0
    account.last_reset_at = now
    return True


def register(store: AccountStore, email: str, password: str) -> Account:
    if not email or not password:
        raise InvalidInput(CREDENTIALS_REQUIRED)
    if store.exists(email):
        raise AlreadyExists()

    now = utcnow()
    account = Account(
        email=email,
        password_hash=hash_password(password),
        subscription_tier=SubscriptionTier.FREE.value,
        monthly_search_count=0,
        created_at=now,
        last_reset_at=now,
    )
    account = store.put(email, account)
    logger.info("Registered account %s", email)
    return account


def authenticate(store: AccountStore, email: str, password: str) -> Account:
    """
    Verify credentials and apply the monthly reset.

    Raises NotFound or InvalidCredentials; the API renders both the same way so
    callers cannot tell which one failed.
    """
    if not email or not password:
        raise InvalidInput(CREDENTIALS_REQUIRED)

    account = store.get(email)
    if account is None:
        raise NotFound()

    valid, new_hash = verify_and_update(password, account.password_hash)
    if not valid:
        raise InvalidCredentials()

    changed = apply_monthly_reset(account)
    if new_hash:
        logger.info("Upgrading legacy password hash for %s", email)
        account.password_hash = new_hash
        changed = True
    if changed:
        account = store.put(email, account)
    return account


def reset_counter(store: AccountStore, email: str) -> Account:
    """Administrative reset of the monthly search counter."""
    account = store.get(email)
    if account is None:
        raise NotFound()
    account.monthly_search_count = 0
    account.last_reset_at = utcnow()
    account = store.put(email, account)
    logger.info("Search counter reset for %s", email)
    return account


def begin_upgrade(store: AccountStore, payments: StripePayments, email: str) -> str:
    """Start a Pro checkout and return the redirect URL. Does not change the account."""
    if not email:
        raise InvalidInput("Email required")
    if not store.exists(email):
        raise NotFound()
    return payments.create_checkout_url(email)


def apply_payment_confirmation(
    store: AccountStore,
    email: str,
    customer_id: Optional[str] = None,
    subscription_id: Optional[str] = None,
) -> Optional[Account]:
    """
    Mark the account Pro after a completed checkout. Safe to apply more than once
    with the same input. Unknown emails are logged and dropped.
    """
    account = store.get(email) if email else None
    if account is None:
        logger.error("Payment confirmation for unknown account: %s", email)
        return None

    if account.subscription_tier != SubscriptionTier.PRO.value or account.upgraded_at is None:
        account.upgraded_at = utcnow()
    account.subscription_tier = SubscriptionTier.PRO.value
    if customer_id:
        account.external_payment_id = customer_id
    if subscription_id:
        account.external_subscription_id = subscription_id

    account = store.put(email, account)
    logger.info("Subscription activated for %s", email)
    return account


def record_recurring_payment(store: AccountStore, email: str) -> Optional[Account]:
    account = store.get(email) if email else None
    if account is None:
        logger.warning("Recurring payment for unknown account: %s", email)
        return None

    account.subscription_tier = SubscriptionTier.PRO.value
    account.last_payment_at = utcnow()
    account = store.put(email, account)
    logger.info("Payment succeeded for %s", email)
    return account


def handle_subscription_cancelled(subscription_id: Optional[str]) -> None:
    # No downgrade: cancellations are handled manually until the product decides otherwise
    logger.info("Subscription cancelled: %s (no account change applied)", subscription_id)
