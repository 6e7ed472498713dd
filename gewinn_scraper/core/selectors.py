"""
Markup parsing and a small query layer over the parsed tree.

Wraps BeautifulSoup (lxml builder) so extraction code can be written as
declarative queries: "descendants with class token T", "first descendant
matching a CSS selector and a predicate".
"""

import warnings
from typing import Callable, Optional, Union

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

import structlog

from .normalizer import contains_keyword

logger = structlog.get_logger(__name__)


def parse_html(raw: Union[bytes, str, None]) -> Optional[BeautifulSoup]:
    """
    Parse real-world HTML into a query-able tree.

    Malformed markup is repaired by lxml; parser warnings are suppressed.

    Args:
        raw: Raw response body

    Returns:
        BeautifulSoup document, or None if no element could be built
    """
    if not raw:
        return None

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            soup = BeautifulSoup(raw, "lxml")
        except ParserRejectedMarkup as e:
            logger.warning("parse_failed", error=str(e))
            return None

    if soup.find() is None:
        logger.warning("parse_failed", error="no root element")
        return None

    return soup


def element_text(element: Optional[Tag]) -> str:
    """
    Text content of an element, stripped ("" for None).

    Inline markup is joined without separators, so
    ``<h2>Gewinn<i>spiel</i></h2>`` reads "Gewinnspiel".
    """
    if element is None:
        return ""
    return element.get_text().strip()


class Selector:
    """
    Query helper bound to a document or a sub-tree.

    Usage:
        selector = Selector(block)
        heading = selector.first("h2")
        link = selector.first_matching("a[href]", lambda a: ...)
    """

    def __init__(self, root: Union[BeautifulSoup, Tag]):
        """
        Initialize selector.

        Args:
            root: Document or element that bounds every query
        """
        self.root = root

    def select(self, css: str) -> list[Tag]:
        """All descendants matching a CSS selector, in document order."""
        return list(self.root.select(css))

    def first(self, css: str) -> Optional[Tag]:
        """First descendant matching a CSS selector."""
        return self.root.select_one(css)

    def first_matching(
        self,
        css: str,
        predicate: Callable[[Tag], bool],
    ) -> Optional[Tag]:
        """First descendant matching a CSS selector and a predicate."""
        for element in self.root.select(css):
            if predicate(element):
                return element
        return None

    def first_with_text(
        self,
        css: str,
        keywords: Union[str, list[str]],
    ) -> Optional[Tag]:
        """First descendant matching ``css`` whose folded text contains a keyword."""
        return self.first_matching(
            css,
            lambda element: contains_keyword(element.get_text(), keywords),
        )

    def first_href(self, css: str) -> Optional[str]:
        """href of the first matching anchor with a non-empty href."""
        element = self.first_matching(css, lambda a: bool((a.get("href") or "").strip()))
        return element.get("href") if element is not None else None


def load_document(http_client, url: str) -> Optional[BeautifulSoup]:
    """
    Fetch and parse a page.

    Args:
        http_client: Open HttpClient
        url: Page URL

    Returns:
        Parsed document, or None if the page could not be fetched or parsed
    """
    result = http_client.fetch(url)
    if not result.ok:
        return None

    soup = parse_html(result.content)
    if soup is None:
        logger.warning("parse_failed", url=url)
    return soup
