from datetime import datetime, timezone
from typing import Dict

from app.models.account import SubscriptionTier

# Plan limits configuration
# Free tier: 5 searches/month, 3 abstracts per search
# Pro tier: 15 searches/month, 10 abstracts per search
PLAN_LIMITS: Dict[str, Dict[str, int]] = {
    SubscriptionTier.FREE.value: {
        "max_searches_per_month": 5,
        "max_results_per_search": 3,
    },
    SubscriptionTier.PRO.value: {
        "max_searches_per_month": 15,
        "max_results_per_search": 10,
    },
}


def _tier_value(tier) -> str:
    return tier.value if isinstance(tier, SubscriptionTier) else str(tier or "")


def get_plan_limit(plan_tier, limit_type: str) -> int:
    """Get the limit value for a specific plan and limit type. Unknown tiers get free limits."""
    return PLAN_LIMITS.get(_tier_value(plan_tier), PLAN_LIMITS[SubscriptionTier.FREE.value]).get(limit_type, 0)


def max_searches_per_month(tier) -> int:
    return get_plan_limit(tier, "max_searches_per_month")


def max_results_per_search(tier) -> int:
    return get_plan_limit(tier, "max_results_per_search")


def is_within_quota(count: int, tier) -> bool:
    """The Nth search (N = monthly limit) is the last one allowed."""
    return count < max_searches_per_month(tier)


def _as_utc(value: datetime) -> datetime:
    # Naive values are stored UTC (SQLite drops tzinfo)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def needs_reset(now: datetime, last_reset_at: datetime) -> bool:
    """True when the monthly counter must roll over (UTC calendar month or year changed)."""
    if last_reset_at is None:
        return True
    now = _as_utc(now)
    last_reset_at = _as_utc(last_reset_at)
    return now.year != last_reset_at.year or now.month != last_reset_at.month


def quota_exceeded_message(tier) -> str:
    limit = max_searches_per_month(tier)
    if _tier_value(tier) == SubscriptionTier.PRO.value:
        label = "Pro users"
    else:
        label = "Free users"
    return f"Search limit reached. {label} get {limit} searches/month. Upgrade for more!"
