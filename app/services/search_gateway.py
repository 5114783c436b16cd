"""
Account-gated search: quota check, NIH RePORTER call, counter update, results email.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from app.core.errors import InvalidInput, NotFound, NotifierFailure, QuotaExceeded
from app.core.plan_limits import is_within_quota, max_results_per_search, quota_exceeded_message
from app.models.account import Account
from app.services.account_service import apply_monthly_reset
from app.services.credential_store import AccountStore
from app.services.nih_reporter import DEFAULT_SORT_FIELD, DEFAULT_SORT_ORDER, NihReporterClient, build_criteria
from app.services.results_email import ResultsMailer

logger = logging.getLogger(__name__)

EMAIL_FAILED_WARNING = "Email delivery failed"


@dataclass
class SearchOutcome:
    account: Account
    projects: list
    warning: Optional[str] = None


def search(
    store: AccountStore,
    client: NihReporterClient,
    mailer: ResultsMailer,
    email: str,
    criteria: Optional[dict],
) -> SearchOutcome:
    """
    Run one quota-counted search for `email` and email the results.

    The counter is only spent on a completed upstream round trip (UpstreamError
    propagates before the increment). A failed email keeps the increment and is
    reported as `warning`.
    """
    if not email or criteria is None:
        raise InvalidInput("Email and search criteria required")

    account = store.get(email)
    if account is None:
        raise NotFound()

    reset = apply_monthly_reset(account)
    tier = account.tier
    if not is_within_quota(account.monthly_search_count, tier):
        if reset:
            store.put(email, account)
        raise QuotaExceeded(quota_exceeded_message(tier))

    search_criteria = build_criteria(criteria)
    projects = client.search(
        search_criteria,
        limit=max_results_per_search(tier),
        offset=0,
        sort_field=DEFAULT_SORT_FIELD,
        sort_order=DEFAULT_SORT_ORDER,
    )

    account.monthly_search_count += 1
    account = store.put(email, account)
    logger.info(
        "Search for %s returned %d projects (%s searches this month)",
        email, len(projects), account.monthly_search_count,
    )

    warning = None
    try:
        mailer.send_results(email, projects, search_criteria)
    except NotifierFailure as e:
        logger.warning("Results email to %s failed: %s", email, e)
        warning = EMAIL_FAILED_WARNING

    return SearchOutcome(account=account, projects=projects, warning=warning)
