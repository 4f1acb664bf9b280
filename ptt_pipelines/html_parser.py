from __future__ import annotations

import copy
import logging
from typing import Optional

from bs4 import BeautifulSoup, Tag

from ptt_pipelines.errors import AgeRestrictedError, MalformedStructureError, NotFoundError
from ptt_pipelines.grammar import AUTHOR_LABEL, DATE_LABEL, TITLE_LABEL, has_post_markers, reaction_from_tag
from ptt_pipelines.models import UNKNOWN, UNTITLED, Comment, Post
from ptt_pipelines.stats import finalize_post
from ptt_pipelines.text_parser import parse_text

logger = logging.getLogger(__name__)

# Elements stripped from a copy of #main-content to leave only the body.
_NON_BODY_SELECTOR = ".article-metaline, .article-metaline-right, .push"


def extract_structured(html: str, source_id: str) -> Post:
    """
    Parse a fetched www.ptt.cc article page.

    Raises:
        NotFoundError: the page is a 404
        AgeRestrictedError: the board shows the over-18 gate
        MalformedStructureError: no #main-content and no parsable text either
    """
    soup = BeautifulSoup(html, "lxml")

    if soup.select_one(".over18-notice") or soup.select_one('input[name="yes"]'):
        raise AgeRestrictedError(
            "Article is on an over-18 board; copy the page content and paste it as text instead."
        )

    main = soup.find(id="main-content")
    if not isinstance(main, Tag):
        # Titles and bodies may mention "404"; only a page without the
        # article container is the error page.
        page_title = soup.title.get_text() if soup.title else ""
        if "404" in page_title or "404 Not Found" in soup.get_text():
            raise NotFoundError(f"Article does not exist (404 Not Found): {source_id}")
        return _reroute_as_text(soup, source_id)

    title, author, date = _parse_metalines(main)
    comments = _parse_pushes(main)
    body = _parse_body(main)

    logger.info(
        "Parsed article page: url=%s title=%s comments=%s", source_id, title, len(comments)
    )
    return finalize_post(
        title=title,
        author=author,
        date=date,
        source=source_id,
        body=body,
        comments=comments,
    )


def _reroute_as_text(soup: BeautifulSoup, source_id: str) -> Post:
    text = soup.get_text("\n")
    if text.strip() and has_post_markers(text):
        logger.warning("No #main-content; parsing rendered text instead: url=%s", source_id)
        return parse_text(text, source_id)
    raise MalformedStructureError(f"Cannot recognize article structure: {source_id}")


def _parse_metalines(main: Tag) -> tuple[str, str, str]:
    title, author, date = UNTITLED, UNKNOWN, UNKNOWN

    for line in main.select(".article-metaline"):
        label = _text_of(line.select_one(".article-meta-tag"))
        value = _text_of(line.select_one(".article-meta-value"))
        if not value:
            continue
        if label == AUTHOR_LABEL:
            author = value
        elif label == TITLE_LABEL:
            title = value
        elif label == DATE_LABEL:
            date = value

    return title, author, date


def _parse_pushes(main: Tag) -> list[Comment]:
    comments: list[Comment] = []

    for el in main.select(".push"):
        tag = _text_of(el.select_one(".push-tag"))
        user = _text_of(el.select_one(".push-userid"))
        reaction = reaction_from_tag(tag)

        # e.g. the "warning-box" push PTT uses for truncated threads
        if reaction is None or not user:
            logger.warning("Skipping push element: tag=%r user=%r", tag, user)
            continue

        content = _text_of(el.select_one(".push-content"), strip=False)
        if content.startswith(":"):
            content = content[1:]

        comments.append(
            Comment(
                id=f"c-{len(comments)}",
                reaction=reaction,
                user=user,
                content=content.strip(),
                timestamp=_text_of(el.select_one(".push-ipdatetime")),
            )
        )

    return comments


def _parse_body(main: Tag) -> str:
    clone = copy.copy(main)
    for el in clone.select(_NON_BODY_SELECTOR):
        el.decompose()
    return clone.get_text().strip()


def _text_of(el: Optional[Tag], strip: bool = True) -> str:
    if el is None:
        return ""
    text = el.get_text()
    return text.strip() if strip else text
