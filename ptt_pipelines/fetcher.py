from __future__ import annotations

import logging
from typing import Literal, Protocol, Sequence
from urllib.parse import quote

import requests
from pydantic import BaseModel, ConfigDict

from ptt_pipelines.errors import FetchUnavailableError
from ptt_pipelines.http_client import HttpClient

logger = logging.getLogger(__name__)

# Substrings proving a payload is a PTT article page (or one of its error pages)
# rather than a proxy's own error or landing page.
PAGE_MARKERS = ("main-content", "over18-notice", "404")


class FetchEndpoint(BaseModel):
    """One way of reaching a page, usually a CORS relay in front of ptt.cc."""

    model_config = ConfigDict(frozen=True)

    name: str
    url_template: str  # "{url}" is replaced by the percent-encoded target
    response_format: Literal["text", "json"] = "text"
    json_field: str = "contents"

    def build_url(self, target_url: str) -> str:
        return self.url_template.replace("{url}", quote(target_url, safe=""))


DEFAULT_FETCH_ENDPOINTS: tuple[FetchEndpoint, ...] = (
    FetchEndpoint(name="CorsProxy", url_template="https://corsproxy.io/?{url}"),
    FetchEndpoint(
        name="AllOrigins",
        url_template="https://api.allorigins.win/get?url={url}&disableCache=true",
        response_format="json",
    ),
    FetchEndpoint(name="CodeTabs", url_template="https://api.codetabs.com/v1/proxy?quest={url}"),
)


class PageFetcher(Protocol):
    def fetch(self, url: str) -> str: ...


def looks_like_ptt_page(payload: str) -> bool:
    return bool(payload) and any(m in payload for m in PAGE_MARKERS)


class PttFetcher:
    """
    Fetch an article page by trying endpoints in the given order.

    The first payload that looks like a PTT page wins. Endpoints are passed
    in explicitly; there is no module-level list consulted at call time.
    """

    def __init__(self, http: HttpClient, endpoints: Sequence[FetchEndpoint] = DEFAULT_FETCH_ENDPOINTS):
        if not endpoints:
            raise ValueError("At least one fetch endpoint is required")
        self.http = http
        self.endpoints = tuple(endpoints)

    def fetch(self, url: str) -> str:
        """
        Raises:
            FetchUnavailableError: every endpoint failed or returned an unusable page
        """
        for endpoint in self.endpoints:
            try:
                payload = self._fetch_via(endpoint, url)
            except (requests.RequestException, ValueError) as e:
                logger.warning("Endpoint failed: endpoint=%s url=%s err=%s", endpoint.name, url, e)
                continue

            if looks_like_ptt_page(payload):
                logger.info("Fetched page: endpoint=%s url=%s chars=%s", endpoint.name, url, len(payload))
                return payload
            logger.warning("Endpoint returned no article markers: endpoint=%s url=%s", endpoint.name, url)

        raise FetchUnavailableError(
            "Cannot reach PTT through any fetch endpoint. Check the URL, "
            "or copy the page/e-mail content and paste it as text instead."
        )

    def _fetch_via(self, endpoint: FetchEndpoint, url: str) -> str:
        request_url = endpoint.build_url(url)
        if endpoint.response_format == "json":
            data = self.http.get_json(request_url)
            if not isinstance(data, dict):
                raise ValueError(f"Unexpected JSON payload from {endpoint.name}")
            value = data.get(endpoint.json_field)
            return value if isinstance(value, str) else ""
        return self.http.get_text(request_url)
