"""
Import orchestrator for the contest pipeline.

Coordinates, strictly in sequence:
- Category discovery from the homepage menu
- Candidate extraction per category page
- Dedup/persist gate per candidate
- Progress lines and run statistics
"""

from typing import Callable, Optional
from urllib.parse import urlparse

import structlog

from .config.loader import AppConfig
from .core.deduplicator import Deduplicator
from .core.http_client import HttpClient
from .core.models import ImportReport, PersistResult
from .navigators.base import NavigatorStrategy
from .navigators.menu import MenuNavigator
from .parsers.base import ParserStrategy
from .parsers.category_page import CategoryPageParser

logger = structlog.get_logger(__name__)

LineSink = Callable[[str], None]


class ContestImporter:
    """
    Runs one import over the configured site.

    Progress lines ("Crawling category page: ...", "Saved: ...") are sent to
    ``line_sink`` and collected on the returned ImportReport; the caller
    decides where they end up.
    """

    def __init__(
        self,
        config: AppConfig,
        store,
        http_client: Optional[HttpClient] = None,
        line_sink: Optional[LineSink] = None,
        dry_run: bool = False,
    ):
        """
        Initialize importer.

        Args:
            config: Importer configuration
            store: Contest store (exists_by_link / insert)
            http_client: HTTP client; one is built from config if omitted
            line_sink: Callable receiving each progress line
            dry_run: Extract and check, but never insert
        """
        self.config = config
        self.site = config.site
        self.store = store
        self.http_client = http_client or HttpClient(
            connect_timeout=config.http.connect_timeout,
            timeout=config.http.timeout,
            requests_per_second=config.http.requests_per_second,
            max_retries=config.http.max_retries,
            accept_language=config.http.accept_language,
        )
        self.line_sink = line_sink
        self.dry_run = dry_run

        self.deduplicator = Deduplicator(
            store=store,
            base_url=self.site.base_url,
            filter_internal_links=self.site.filter_internal_links,
            dry_run=dry_run,
        )

    def _emit(self, report: ImportReport, line: str) -> None:
        report.lines.append(line)
        if self.line_sink is not None:
            self.line_sink(line)

    def _build_navigator(self) -> NavigatorStrategy:
        return MenuNavigator(http_client=self.http_client, site=self.site)

    def _build_parser(self) -> ParserStrategy:
        return CategoryPageParser(http_client=self.http_client, site=self.site)

    def run(self) -> ImportReport:
        """
        Run the import.

        Returns:
            ImportReport with statistics and emitted lines
        """
        report = ImportReport()
        stats = report.stats

        logger.info(
            "starting_import",
            site=self.site.base_url,
            filter_internal_links=self.site.filter_internal_links,
            dry_run=self.dry_run,
        )

        with self.http_client:
            navigator = self._build_navigator()
            parser = self._build_parser()

            menu_links = navigator.discover()
            stats.menu_links = len(menu_links)

            for menu_url in menu_links:
                self._emit(report, f"Crawling category page: {menu_url}")
                self._process_page(parser, menu_url, report)

        self._emit(report, self._summary_line(report))

        logger.info("import_complete", **stats.to_dict())

        return report

    def _process_page(
        self,
        parser: ParserStrategy,
        page_url: str,
        report: ImportReport,
    ) -> None:
        """Extract and gate the candidates of one category page."""
        stats = report.stats

        soup = parser.fetch_page(page_url)
        if soup is None:
            stats.pages_failed += 1
            return

        candidates = parser.parse_document(soup, page_url)

        for candidate in candidates:
            stats.candidates += 1
            result = self.deduplicator.consider(candidate)
            stats.record(result)

            if result is PersistResult.INSERTED:
                report.inserted_links.append(candidate.participation_url)
                suffix = ""
                if candidate.deadline is not None:
                    suffix = f" (deadline: {candidate.deadline:%Y-%m-%d})"
                verb = "Would save" if self.dry_run else "Saved"
                self._emit(report, f"{verb}: {candidate.participation_url}{suffix}")

    def _summary_line(self, report: ImportReport) -> str:
        stats = report.stats
        host = urlparse(self.site.base_url).netloc or self.site.site_name
        prefix = "Dry run" if self.dry_run else "Import"
        return (
            f"{prefix} from {host} finished: "
            f"{stats.menu_links} category pages, "
            f"{stats.candidates} entries, "
            f"{stats.inserted} saved, "
            f"{stats.skipped_duplicate} already known"
        )
