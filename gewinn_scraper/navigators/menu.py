"""
Menu navigator: homepage category menu → category pages.

12gewinn.de lists its contest categories in the homepage menu
(``<li class="Menu2">``); every anchor below such an entry is a category
page to crawl.
"""

from typing import Optional

from gewinn_scraper.core.normalizer import normalize_url
from gewinn_scraper.core.selectors import Selector, load_document

from .base import NavigatorStrategy


class MenuNavigator(NavigatorStrategy):
    """
    Discovers category pages from the homepage menu.

    Links are normalized against the homepage URL and deduplicated while
    keeping first-seen order. Any fetch or parse failure yields an empty
    list.
    """

    def discover(self, start_url: Optional[str] = None) -> list[str]:
        """
        Discover category links.

        Args:
            start_url: Homepage URL (defaults to the configured site)

        Returns:
            Absolute category URLs in menu order
        """
        homepage_url = start_url or self.site.start_url

        self.logger.info("discovering_menu_links", url=homepage_url)

        soup = load_document(self.http_client, homepage_url)
        if soup is None:
            self.logger.warning("homepage_unavailable", url=homepage_url)
            return []

        links: list[str] = []
        seen_urls: set[str] = set()

        for anchor in Selector(soup).select(self.site.menu_link_selector):
            href = anchor.get("href") or ""
            if not href.strip():
                continue

            url = normalize_url(homepage_url, href, strict_root=self.site.strict_root_urls)
            if url in seen_urls:
                continue

            seen_urls.add(url)
            links.append(url)

        self.logger.info("menu_links_discovered", url=homepage_url, count=len(links))

        return links
