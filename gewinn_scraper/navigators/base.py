"""
Base class for navigator strategies.

Navigators implement the discovery phase - finding the category pages
that the parsers then extract contests from.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

import structlog

from gewinn_scraper.core.http_client import HttpClient
from gewinn_scraper.core.normalizer import SITE_TIMEZONE

logger = structlog.get_logger(__name__)

_TRUE_VALUES = {"true", "yes", "on", "1"}
_FALSE_VALUES = {"false", "no", "off", "0"}


def parse_bool(value, default: bool) -> bool:
    """
    Read a config flag that may arrive as a string (e.g. from env vars).

    Raises:
        ValueError: If a string is not a recognised boolean
    """
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"Not a boolean: {value!r}")


@dataclass
class SiteConfig:
    """Markup conventions and policies for the crawled site."""

    base_url: str = "https://www.12gewinn.de"
    site_name: str = "12gewinn.de"
    homepage_url: Optional[str] = None  # Defaults to base_url

    # Discovery
    menu_link_selector: str = "li.Menu2 a[href]"

    # Extraction
    item_selector: str = "div.Item"
    title_selector: str = "h2"
    button_link_selector: str = "p.DivRechtsButton a[href]"
    fallback_link_selector: str = "a[href]"
    fallback_link_phrases: list[str] = field(default_factory=lambda: ["zum gewinnspiel"])
    deadline_selector: str = "p"
    deadline_keywords: list[str] = field(
        default_factory=lambda: ["einsendeschluss", "teilnahmeschluss"]
    )
    timezone: str = SITE_TIMEZONE

    # Policies
    filter_internal_links: bool = True
    strict_root_urls: bool = True  # False: legacy base+href root resolution

    @property
    def start_url(self) -> str:
        return self.homepage_url or self.base_url

    @classmethod
    def from_dict(cls, data: dict) -> "SiteConfig":
        """Create from dictionary (e.g., from YAML)."""
        defaults = cls()
        return cls(
            base_url=data.get("base_url", defaults.base_url),
            site_name=data.get("site_name", defaults.site_name),
            homepage_url=data.get("homepage_url"),
            menu_link_selector=data.get("menu_link_selector", defaults.menu_link_selector),
            item_selector=data.get("item_selector", defaults.item_selector),
            title_selector=data.get("title_selector", defaults.title_selector),
            button_link_selector=data.get("button_link_selector", defaults.button_link_selector),
            fallback_link_selector=data.get("fallback_link_selector", defaults.fallback_link_selector),
            fallback_link_phrases=[
                p.lower() for p in data.get("fallback_link_phrases", defaults.fallback_link_phrases)
            ],
            deadline_selector=data.get("deadline_selector", defaults.deadline_selector),
            deadline_keywords=[
                k.lower() for k in data.get("deadline_keywords", defaults.deadline_keywords)
            ],
            timezone=data.get("timezone", defaults.timezone),
            filter_internal_links=parse_bool(data.get("filter_internal_links"), True),
            strict_root_urls=parse_bool(data.get("strict_root_urls"), True),
        )


class NavigatorStrategy(ABC):
    """
    Abstract base class for navigator strategies.

    Navigators turn a start page into the list of category URLs to crawl.
    """

    def __init__(self, http_client: HttpClient, site: Optional[SiteConfig] = None):
        """
        Initialize navigator.

        Args:
            http_client: Open, shared HTTP client
            site: Site configuration (defaults to 12gewinn.de)
        """
        self.http_client = http_client
        self.site = site or SiteConfig()
        self.logger = logger.bind(navigator=self.__class__.__name__)

    @abstractmethod
    def discover(self, start_url: Optional[str] = None) -> list[str]:
        """
        Discover category page URLs.

        Args:
            start_url: Page to start from (defaults to the site homepage)

        Returns:
            Absolute URLs, deduplicated, in discovery order
        """
        pass

    def get_strategy_name(self) -> str:
        """Return human-readable strategy name."""
        return self.__class__.__name__
