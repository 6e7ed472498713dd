"""
Base class for parser strategies.

Parsers implement the extraction phase - turning a category page into
contest candidates.
"""

from abc import ABC, abstractmethod
from typing import Optional

import structlog
from bs4 import BeautifulSoup

from gewinn_scraper.core.models import CandidateEntry
from gewinn_scraper.core.http_client import HttpClient
from gewinn_scraper.core.selectors import load_document
from gewinn_scraper.navigators.base import SiteConfig

logger = structlog.get_logger(__name__)


class ParserStrategy(ABC):
    """
    Abstract base class for parser strategies.

    Extraction is best-effort: missing markup produces absent fields,
    an unreachable page produces no candidates. Nothing is raised.
    """

    def __init__(self, http_client: HttpClient, site: Optional[SiteConfig] = None):
        """
        Initialize parser.

        Args:
            http_client: Open, shared HTTP client
            site: Site configuration (defaults to 12gewinn.de)
        """
        self.http_client = http_client
        self.site = site or SiteConfig()
        self.logger = logger.bind(parser=self.__class__.__name__)

    def fetch_page(self, page_url: str) -> Optional[BeautifulSoup]:
        """Fetch and parse a page; None if either step failed."""
        self.logger.info("fetching_page", url=page_url)
        return load_document(self.http_client, page_url)

    def extract(self, page_url: str) -> list[CandidateEntry]:
        """
        Extract candidates from a page.

        Args:
            page_url: Category page URL

        Returns:
            One CandidateEntry per item block, in page order; empty if
            the page could not be loaded
        """
        soup = self.fetch_page(page_url)
        if soup is None:
            return []

        return self.parse_document(soup, page_url)

    @abstractmethod
    def parse_document(self, soup: BeautifulSoup, page_url: str) -> list[CandidateEntry]:
        """
        Extract candidates from an already parsed page.

        Args:
            soup: Parsed page
            page_url: URL the page was loaded from (base for relative links)

        Returns:
            Candidates in page order
        """
        pass

    def get_strategy_name(self) -> str:
        """Return human-readable strategy name."""
        return self.__class__.__name__
