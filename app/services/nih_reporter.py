"""
NIH RePORTER projects search API client.
"""
import logging
from typing import Optional, Tuple

import requests

from app.core.errors import UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_SORT_FIELD = "project_start_date"
DEFAULT_SORT_ORDER = "desc"
# Fields scanned by the free-text clause: title, terms, abstract
TEXT_SEARCH_FIELDS = "projecttitle,terms,abstracttext"


def build_criteria(criteria: Optional[dict]) -> dict:
    """
    Copy caller criteria into the RePORTER shape.

    A `text_search` value becomes an `advanced_text_search` clause (operator
    "and" over title/terms/abstract); `text_search` and the loose `text` key
    are dropped. Every other key passes through unchanged.
    """
    search_criteria = dict(criteria or {})
    text_search = search_criteria.pop("text_search", None)
    if text_search:
        search_criteria["advanced_text_search"] = {
            "operator": "and",
            "search_field": TEXT_SEARCH_FIELDS,
            "search_text": str(text_search),
        }
        search_criteria.pop("text", None)
    return search_criteria


class NihReporterClient:
    def __init__(self, url: str, timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def search_raw(self, payload: dict) -> Tuple[int, str]:
        """POST a prepared payload and return (status_code, body) untouched."""
        response = self.session.post(self.url, json=payload, timeout=self.timeout)
        return response.status_code, response.text

    def search(
        self,
        criteria: dict,
        limit: int,
        offset: int = 0,
        sort_field: str = DEFAULT_SORT_FIELD,
        sort_order: str = DEFAULT_SORT_ORDER,
    ) -> list:
        """
        Run a projects search and return the `results` list.

        Raises:
            UpstreamError: transport failure, non-2xx status or a body that is not JSON
        """
        payload = {
            "criteria": criteria,
            "sort_field": sort_field,
            "sort_order": sort_order,
            "offset": offset,
            "limit": limit,
        }
        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("NIH RePORTER request failed: %s", e)
            raise UpstreamError(f"NIH API request failed: {e}") from e

        if not response.ok:
            logger.error("NIH RePORTER returned %s: %s", response.status_code, response.text[:500])
            raise UpstreamError(f"NIH API error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error("NIH RePORTER returned a non-JSON body")
            raise UpstreamError("NIH API returned invalid JSON") from e

        return data.get("results") or []
