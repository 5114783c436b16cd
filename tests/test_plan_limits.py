from datetime import datetime, timedelta, timezone

import pytest

from app.core.plan_limits import (
    is_within_quota,
    max_results_per_search,
    max_searches_per_month,
    needs_reset,
    quota_exceeded_message,
)
from app.models.account import SubscriptionTier


def test_tier_limits():
    assert max_searches_per_month(SubscriptionTier.FREE) == 5
    assert max_results_per_search(SubscriptionTier.FREE) == 3
    assert max_searches_per_month(SubscriptionTier.PRO) == 15
    assert max_results_per_search(SubscriptionTier.PRO) == 10


def test_limits_accept_plain_strings():
    assert max_searches_per_month("pro") == 15
    assert max_results_per_search("free") == 3


def test_unknown_tier_gets_free_limits():
    assert max_searches_per_month("enterprise") == 5
    assert max_results_per_search(None) == 3


@pytest.mark.parametrize("tier", list(SubscriptionTier))
def test_last_search_at_limit_is_allowed_and_next_rejected(tier):
    limit = max_searches_per_month(tier)
    assert is_within_quota(limit - 1, tier) is True
    assert is_within_quota(limit, tier) is False
    assert is_within_quota(0, tier) is True


def test_needs_reset_same_month():
    last = datetime(2026, 3, 1, 0, 0, tzinfo=timezone.utc)
    now = datetime(2026, 3, 31, 23, 59, tzinfo=timezone.utc)
    assert needs_reset(now, last) is False


def test_needs_reset_new_month():
    last = datetime(2026, 3, 31, 23, 59, tzinfo=timezone.utc)
    now = datetime(2026, 4, 1, 0, 0, tzinfo=timezone.utc)
    assert needs_reset(now, last) is True


def test_needs_reset_same_month_different_year():
    last = datetime(2025, 6, 15, tzinfo=timezone.utc)
    now = datetime(2026, 6, 15, tzinfo=timezone.utc)
    assert needs_reset(now, last) is True


def test_needs_reset_with_naive_stored_timestamp():
    # SQLite hands timestamps back without tzinfo
    last = datetime(2026, 3, 10)
    now = datetime(2026, 3, 20, tzinfo=timezone.utc)
    assert needs_reset(now, last) is False


def test_needs_reset_compares_in_utc_regardless_of_offset():
    # Postgres returns timestamptz in the session timezone
    eastern = timezone(timedelta(hours=-4))
    last = datetime(2026, 11, 1, 2, 0, tzinfo=timezone.utc).astimezone(eastern)
    now = datetime(2026, 11, 1, 3, 0, tzinfo=timezone.utc)
    assert last.month == 10
    assert needs_reset(now, last) is False


def test_needs_reset_with_offset_now_across_utc_month():
    eastern = timezone(timedelta(hours=-4))
    last = datetime(2026, 10, 15, tzinfo=timezone.utc)
    now = datetime(2026, 10, 31, 22, 0, tzinfo=eastern)
    assert needs_reset(now, last) is True


def test_quota_exceeded_message_names_tier_limit():
    assert "Free users get 5 searches/month" in quota_exceeded_message(SubscriptionTier.FREE)
    assert "Pro users get 15 searches/month" in quota_exceeded_message(SubscriptionTier.PRO)
