from __future__ import annotations

from typing import Any

import pytest
import requests

from ptt_pipelines.errors import FetchUnavailableError
from ptt_pipelines.fetcher import DEFAULT_FETCH_ENDPOINTS, FetchEndpoint, PttFetcher, looks_like_ptt_page
from ptt_pipelines.http_client import HttpClient, HttpConfig

URL = "https://www.ptt.cc/bbs/Stock/M.1.A.B2C.html"


class _DummyHttp(HttpClient):
    """Responds from a table keyed by endpoint host; exceptions are raised."""

    def __init__(self, responses: dict[str, Any]):
        super().__init__(
            HttpConfig(
                timeout_sec=1.0,
                delay_sec=0.0,
                max_retries=0,
                backoff_base_sec=0.0,
                backoff_max_sec=0.0,
                user_agent="test",
            )
        )
        self.responses = responses
        self.calls: list[str] = []

    def _respond(self, url: str) -> Any:
        self.calls.append(url)
        for host, value in self.responses.items():
            if host in url:
                if isinstance(value, Exception):
                    raise value
                return value
        raise requests.ConnectionError(f"no route to {url}")

    def get_text(self, url: str) -> str:
        return self._respond(url)

    def get_json(self, url: str) -> Any:
        return self._respond(url)


def test_build_url_percent_encodes_target():
    endpoint = FetchEndpoint(name="CorsProxy", url_template="https://corsproxy.io/?{url}")
    assert endpoint.build_url(URL) == (
        "https://corsproxy.io/?https%3A%2F%2Fwww.ptt.cc%2Fbbs%2FStock%2FM.1.A.B2C.html"
    )


def test_looks_like_ptt_page():
    assert looks_like_ptt_page('<div id="main-content">')
    assert looks_like_ptt_page('<div class="over18-notice">')
    assert not looks_like_ptt_page("<html>proxy error</html>")
    assert not looks_like_ptt_page("")


def test_fetch_falls_through_to_next_endpoint_in_order():
    http = _DummyHttp(
        {
            "corsproxy.io": requests.ConnectionError("boom"),
            "allorigins.win": {"contents": '<div id="main-content">ok</div>'},
        }
    )
    html = PttFetcher(http, DEFAULT_FETCH_ENDPOINTS).fetch(URL)

    assert html == '<div id="main-content">ok</div>'
    assert ["corsproxy.io" in http.calls[0], "allorigins.win" in http.calls[1]] == [True, True]
    assert len(http.calls) == 2


def test_fetch_skips_payload_without_article_markers():
    http = _DummyHttp(
        {
            "corsproxy.io": "<html>too many requests</html>",
            "allorigins.win": {"contents": None},
            "codetabs.com": '<div id="main-content">third</div>',
        }
    )
    assert PttFetcher(http).fetch(URL) == '<div id="main-content">third</div>'
    assert len(http.calls) == 3


def test_fetch_raises_when_every_endpoint_fails():
    http = _DummyHttp({})
    with pytest.raises(FetchUnavailableError):
        PttFetcher(http).fetch(URL)
    assert len(http.calls) == len(DEFAULT_FETCH_ENDPOINTS)


def test_fetch_uses_only_the_endpoints_it_was_given():
    http = _DummyHttp({"example.test": '<div id="main-content">x</div>'})
    fetcher = PttFetcher(http, [FetchEndpoint(name="Direct", url_template="https://example.test/?u={url}")])

    assert fetcher.fetch(URL) == '<div id="main-content">x</div>'
    assert http.calls == ["https://example.test/?u=https%3A%2F%2Fwww.ptt.cc%2Fbbs%2FStock%2FM.1.A.B2C.html"]


def test_fetcher_requires_endpoints():
    with pytest.raises(ValueError):
        PttFetcher(_DummyHttp({}), [])
