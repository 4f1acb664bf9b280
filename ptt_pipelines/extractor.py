from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Optional

from ptt_pipelines.errors import AmbiguousSourceError, EmptyInputError, FetchUnavailableError, TooShortError
from ptt_pipelines.fetcher import PageFetcher
from ptt_pipelines.html_parser import extract_structured
from ptt_pipelines.models import PASTED_TEXT_SOURCE, Post
from ptt_pipelines.text_parser import parse_text

logger = logging.getLogger(__name__)

ARTICLE_URL_RE = re.compile(r"ptt\.cc/bbs/[\w-]+/M\.\d+\.A\.\w+\.html")
WEBMAIL_HOST = "mail.google.com"

LOCATOR_MAX_CHARS = 250
WEBMAIL_MAX_CHARS = 200
MIN_INPUT_CHARS = 10


class InputRoute(Enum):
    LOCATOR = "locator"
    WEBMAIL = "webmail"
    TEXT = "text"


def route_input(raw: str) -> InputRoute:
    """
    Decide how to treat a free-form input string by its shape alone.

    A short single-line article URL is fetched; a short single-line webmail
    link is refused; anything else (including long pastes that merely
    contain such links) is parsed as text.
    """
    text = (raw or "").strip()
    single_line = "\n" not in text

    if ARTICLE_URL_RE.search(text) and single_line and len(text) < LOCATOR_MAX_CHARS:
        return InputRoute.LOCATOR
    if WEBMAIL_HOST in text and single_line and len(text) < WEBMAIL_MAX_CHARS:
        return InputRoute.WEBMAIL
    return InputRoute.TEXT


def resolve_article_url(locator: str) -> str:
    """Canonical https://www.ptt.cc URL built from the article path in the locator."""
    m = ARTICLE_URL_RE.search(locator)
    if not m:
        raise ValueError(f"Not an article URL: {locator!r}")
    return f"https://www.{m.group(0)}"


class PttExtractor:
    """
    Single entry point: turn a URL or pasted text into a Post.

    Every call either returns a complete Post or raises a PttExtractionError
    subclass; no partial results.
    """

    def __init__(self, fetcher: Optional[PageFetcher] = None):
        self.fetcher = fetcher

    def extract(self, raw: str) -> Post:
        route = route_input(raw)
        text = (raw or "").strip()
        logger.info("Routing input: route=%s chars=%s", route.value, len(text))

        if route is InputRoute.LOCATOR:
            return self._extract_from_url(resolve_article_url(text))

        if route is InputRoute.WEBMAIL:
            raise AmbiguousSourceError(
                "Webmail links cannot be read directly. Open the mail, select all, "
                "copy, and paste the content as text instead."
            )

        if not text:
            raise EmptyInputError("Input is empty; enter a PTT article URL or paste the article text.")
        if len(text) < MIN_INPUT_CHARS:
            raise TooShortError(
                f"Input is too short ({len(text)} chars); enter a PTT article URL or paste the full article text."
            )
        return parse_text(text, PASTED_TEXT_SOURCE)

    def _extract_from_url(self, url: str) -> Post:
        if self.fetcher is None:
            raise FetchUnavailableError(f"No fetcher configured; cannot download {url}")
        html = self.fetcher.fetch(url)
        return extract_structured(html, url)
