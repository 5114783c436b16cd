import pytest
import requests

from app.core.errors import UpstreamError
from app.services.nih_reporter import NihReporterClient, build_criteria


class StubResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ""

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class StubSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def post(self, url, json=None, timeout=None):
        self.requests.append({"url": url, "json": json, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def test_build_criteria_rewrites_text_search():
    criteria = {"text_search": "cancer", "text": "cancer", "fiscal_years": [2023]}
    built = build_criteria(criteria)
    assert built == {
        "fiscal_years": [2023],
        "advanced_text_search": {
            "operator": "and",
            "search_field": "projecttitle,terms,abstracttext",
            "search_text": "cancer",
        },
    }
    # Caller's dict is left alone
    assert criteria["text_search"] == "cancer"


def test_build_criteria_stringifies_text():
    assert build_criteria({"text_search": 42})["advanced_text_search"]["search_text"] == "42"


def test_build_criteria_without_text_passes_through():
    assert build_criteria({"org_names": ["Johns Hopkins"]}) == {"org_names": ["Johns Hopkins"]}
    assert build_criteria(None) == {}


def test_build_criteria_leaves_lone_text_key():
    assert build_criteria({"text": "cancer"}) == {"text": "cancer"}


def test_search_posts_payload_and_returns_results():
    session = StubSession(StubResponse(200, {"meta": {}, "results": [{"project_title": "A"}]}))
    client = NihReporterClient("https://nih.test/search", timeout=5, session=session)

    results = client.search({"fiscal_years": [2024]}, limit=3)

    assert results == [{"project_title": "A"}]
    sent = session.requests[0]
    assert sent["url"] == "https://nih.test/search"
    assert sent["timeout"] == 5
    assert sent["json"] == {
        "criteria": {"fiscal_years": [2024]},
        "sort_field": "project_start_date",
        "sort_order": "desc",
        "offset": 0,
        "limit": 3,
    }


def test_search_missing_results_is_empty():
    client = NihReporterClient("https://nih.test/search", session=StubSession(StubResponse(200, {"meta": {}})))
    assert client.search({}, limit=3) == []


def test_non_2xx_raises_upstream_error():
    client = NihReporterClient("https://nih.test/search", session=StubSession(StubResponse(500, text="boom")))
    with pytest.raises(UpstreamError) as exc_info:
        client.search({}, limit=3)
    assert "500" in exc_info.value.detail


def test_transport_error_raises_upstream_error():
    session = StubSession(error=requests.ConnectionError("connection refused"))
    client = NihReporterClient("https://nih.test/search", session=session)
    with pytest.raises(UpstreamError):
        client.search({}, limit=3)


def test_non_json_body_raises_upstream_error():
    client = NihReporterClient("https://nih.test/search", session=StubSession(StubResponse(200, None, "<html>")))
    with pytest.raises(UpstreamError):
        client.search({}, limit=3)


def test_search_raw_returns_status_and_body():
    session = StubSession(StubResponse(400, text='{"error": "bad criteria"}'))
    client = NihReporterClient("https://nih.test/search", session=session)
    assert client.search_raw({"criteria": {}}) == (400, '{"error": "bad criteria"}')
