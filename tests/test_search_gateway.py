from datetime import datetime, timedelta, timezone

import pytest

from app.core.errors import InvalidInput, NotFound, QuotaExceeded, UpstreamError
from app.services import account_service
from app.services.search_gateway import EMAIL_FAILED_WARNING, search

from tests.fakes import FakeMailer, FakeSearchClient, sample_projects


@pytest.fixture
def account(store):
    return account_service.register(store, "a@x.com", "pw")


def set_count(store, count, tier="free", last_reset_at=None):
    account = store.get("a@x.com")
    account.monthly_search_count = count
    account.subscription_tier = tier
    if last_reset_at is not None:
        account.last_reset_at = last_reset_at
    store.put("a@x.com", account)


def test_search_increments_and_notifies(store, account, search_client, mailer):
    outcome = search(store, search_client, mailer, "a@x.com", {"text_search": "cancer"})

    assert len(outcome.projects) == 2
    assert outcome.warning is None
    assert outcome.account.monthly_search_count == 1
    assert store.get("a@x.com").monthly_search_count == 1

    assert len(mailer.sent) == 1
    assert mailer.sent[0]["to"] == "a@x.com"
    assert len(mailer.sent[0]["projects"]) == 2


def test_search_uses_free_tier_limits_and_fixed_sort(store, account, search_client, mailer):
    search(store, search_client, mailer, "a@x.com", {"text_search": "cancer", "fiscal_years": [2024]})

    call = search_client.calls[0]
    assert call["limit"] == 3
    assert call["offset"] == 0
    assert call["sort_field"] == "project_start_date"
    assert call["sort_order"] == "desc"
    assert call["criteria"] == {
        "fiscal_years": [2024],
        "advanced_text_search": {
            "operator": "and",
            "search_field": "projecttitle,terms,abstracttext",
            "search_text": "cancer",
        },
    }


def test_search_uses_pro_result_limit(store, account, search_client, mailer):
    set_count(store, 0, tier="pro")
    search(store, search_client, mailer, "a@x.com", {"text_search": "cancer"})
    assert search_client.calls[0]["limit"] == 10


def test_search_requires_email_and_criteria(store, account, search_client, mailer):
    with pytest.raises(InvalidInput):
        search(store, search_client, mailer, "", {"text_search": "x"})
    with pytest.raises(InvalidInput):
        search(store, search_client, mailer, "a@x.com", None)
    assert search_client.calls == []


def test_search_unknown_account(store, search_client, mailer):
    with pytest.raises(NotFound):
        search(store, search_client, mailer, "nobody@x.com", {"text_search": "x"})
    assert search_client.calls == []


def test_free_account_at_limit_is_rejected(store, account, search_client, mailer):
    set_count(store, 5)

    with pytest.raises(QuotaExceeded) as exc_info:
        search(store, search_client, mailer, "a@x.com", {"text_search": "x"})

    assert "5 searches/month" in exc_info.value.message
    assert store.get("a@x.com").monthly_search_count == 5
    assert search_client.calls == []
    assert mailer.sent == []


def test_fifth_free_search_is_allowed(store, account, search_client, mailer):
    set_count(store, 4)
    outcome = search(store, search_client, mailer, "a@x.com", {"text_search": "x"})
    assert outcome.account.monthly_search_count == 5


def test_pro_account_at_limit_is_rejected(store, account, search_client, mailer):
    set_count(store, 15, tier="pro")
    with pytest.raises(QuotaExceeded) as exc_info:
        search(store, search_client, mailer, "a@x.com", {"text_search": "x"})
    assert "15 searches/month" in exc_info.value.message


def test_previous_month_counter_resets_before_quota_check(store, account, search_client, mailer):
    set_count(store, 5, last_reset_at=datetime.now(timezone.utc) - timedelta(days=40))

    outcome = search(store, search_client, mailer, "a@x.com", {"text_search": "x"})

    assert outcome.account.monthly_search_count == 1
    stored = store.get("a@x.com")
    now = datetime.now(timezone.utc)
    assert stored.monthly_search_count == 1
    assert (stored.last_reset_at.year, stored.last_reset_at.month) == (now.year, now.month)


def test_upstream_failure_does_not_spend_quota(store, account, mailer):
    failing = FakeSearchClient(error=UpstreamError("NIH API error: 500"))
    set_count(store, 2)

    with pytest.raises(UpstreamError):
        search(store, failing, mailer, "a@x.com", {"text_search": "x"})

    assert store.get("a@x.com").monthly_search_count == 2
    assert mailer.sent == []


def test_empty_result_set_still_counts(store, account, mailer):
    empty = FakeSearchClient(projects=[])
    outcome = search(store, empty, mailer, "a@x.com", {"text_search": "nothing"})
    assert outcome.projects == []
    assert outcome.account.monthly_search_count == 1
    assert mailer.sent[0]["projects"] == []


def test_email_failure_is_a_warning_and_keeps_increment(store, account):
    failing_mailer = FakeMailer(fail=True)
    client = FakeSearchClient(projects=sample_projects(1))

    outcome = search(store, client, failing_mailer, "a@x.com", {"text_search": "x"})

    assert outcome.warning == EMAIL_FAILED_WARNING
    assert outcome.account.monthly_search_count == 1
    assert store.get("a@x.com").monthly_search_count == 1
