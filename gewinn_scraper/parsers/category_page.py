"""
Category page parser.

Every ``<div class="Item">`` block on a category page is one contest
listing. Title, participation link and deadline are extracted
independently of each other.
"""

from datetime import datetime
from typing import Optional

from bs4 import BeautifulSoup, Tag

from gewinn_scraper.core.models import CandidateEntry
from gewinn_scraper.core.normalizer import (
    contains_keyword,
    extract_deadline,
    normalize_url,
)
from gewinn_scraper.core.selectors import Selector, element_text

from .base import ParserStrategy


class CategoryPageParser(ParserStrategy):
    """
    Parser for 12gewinn.de category pages.

    Extracts per item block:
    - Title from the first heading
    - Participation link from the right-hand button, falling back to
      any "Zum Gewinnspiel" anchor
    - Deadline from the first "Einsendeschluss"/"Teilnahmeschluss" paragraph
    """

    def parse_document(self, soup: BeautifulSoup, page_url: str) -> list[CandidateEntry]:
        """Map every item block of a parsed page to a candidate."""
        blocks = Selector(soup).select(self.site.item_selector)

        candidates = [self.parse_block(block, page_url) for block in blocks]

        self.logger.info(
            "category_page_parsed",
            url=page_url,
            blocks=len(blocks),
            with_link=sum(1 for c in candidates if c.has_link),
        )

        return candidates

    def parse_block(self, block: Tag, page_url: str) -> CandidateEntry:
        """Extract one candidate from an item block."""
        selector = Selector(block)

        return CandidateEntry(
            title=self._extract_title(selector),
            participation_url=self._extract_link(selector, page_url),
            deadline=self._extract_deadline(selector),
            source_url=page_url,
        )

    def _extract_title(self, selector: Selector) -> Optional[str]:
        title = element_text(selector.first(self.site.title_selector))
        return title or None

    def _extract_link(self, selector: Selector, page_url: str) -> Optional[str]:
        """Button link first, then the first "Zum Gewinnspiel" anchor."""
        href = selector.first_href(self.site.button_link_selector)

        if href is None:
            anchor = selector.first_matching(
                self.site.fallback_link_selector,
                lambda a: bool((a.get("href") or "").strip())
                and contains_keyword(a.get_text(), self.site.fallback_link_phrases),
            )
            if anchor is not None:
                href = anchor.get("href")

        if href is None:
            return None

        # Anchors may be relative to the category page, not the site root
        return normalize_url(page_url, href, strict_root=self.site.strict_root_urls)

    def _extract_deadline(self, selector: Selector) -> Optional[datetime]:
        paragraph = selector.first_with_text(
            self.site.deadline_selector,
            self.site.deadline_keywords,
        )
        if paragraph is None:
            return None

        return extract_deadline(paragraph.get_text(), self.site.timezone)
