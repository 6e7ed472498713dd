"""
Dedup/persist gate for extracted contest candidates.

A candidate is inserted only if it has a participation URL, that URL does
not point back into the source site (when internal filtering is enabled)
and the store does not already hold it. The exists-check and the insert
are separate store calls; concurrent runs rely on the table's unique
constraint, whose violations are reported as duplicates.
"""

from typing import Optional, Protocol

import structlog

from gewinn_scraper.errors import StoreWriteError

from .models import CandidateEntry, ContestStatus, PersistResult
from .normalizer import to_local_naive

logger = structlog.get_logger(__name__)


class LinkStore(Protocol):
    """Store operations the gate needs."""

    def exists_by_link(self, link: str) -> bool: ...

    def insert(self, link: str, description=None, ends_at=None, status=ContestStatus.PLANNED) -> bool: ...


def internal_prefix(base_url: str) -> str:
    """Prefix identifying links back into the source site."""
    return base_url.rstrip("/") + "/"


class Deduplicator:
    """
    Persist gate keyed by participation URL.

    Usage:
        gate = Deduplicator(store, base_url="https://www.12gewinn.de")
        result = gate.consider(candidate)
    """

    def __init__(
        self,
        store: LinkStore,
        base_url: str,
        filter_internal_links: bool = True,
        dry_run: bool = False,
    ):
        """
        Initialize gate.

        Args:
            store: Store providing exists_by_link / insert
            base_url: Source site URL; links below it count as internal
            filter_internal_links: Skip links pointing into the source site
            dry_run: Run every check but never insert
        """
        self.store = store
        self.base_url = base_url
        self.filter_internal_links = filter_internal_links
        self.dry_run = dry_run
        self._internal_prefix = internal_prefix(base_url)
        # Links "inserted" during a dry run, so repeats still read as duplicates
        self._dry_run_seen: set[str] = set()

    def is_internal(self, link: str) -> bool:
        """Check whether a link points into the source site (case-sensitive)."""
        return link.startswith(self._internal_prefix)

    def check(self, entry: CandidateEntry) -> Optional[PersistResult]:
        """
        Run the skip rules without inserting.

        Args:
            entry: Candidate to check

        Returns:
            The skip result, or None if the candidate should be inserted
        """
        link = entry.participation_url
        if not link:
            return PersistResult.SKIPPED_NO_LINK

        if self.filter_internal_links and self.is_internal(link):
            return PersistResult.SKIPPED_INTERNAL

        if link in self._dry_run_seen or self.store.exists_by_link(link):
            return PersistResult.SKIPPED_DUPLICATE

        return None

    def consider(self, entry: CandidateEntry) -> PersistResult:
        """
        Offer a candidate for persistence.

        Args:
            entry: Extracted candidate

        Returns:
            PersistResult describing what happened
        """
        skipped = self.check(entry)
        if skipped is not None:
            logger.debug(
                "candidate_skipped",
                reason=skipped.value,
                url=entry.participation_url,
            )
            return skipped

        link = entry.participation_url

        if self.dry_run:
            self._dry_run_seen.add(link)
            logger.info("dry_run_insert", url=link)
            return PersistResult.INSERTED

        try:
            inserted = self.store.insert(
                link,
                description=entry.title,
                ends_at=to_local_naive(entry.deadline),
                status=ContestStatus.PLANNED,
            )
        except StoreWriteError as e:
            logger.warning("candidate_rejected", url=link, error=str(e))
            return PersistResult.SKIPPED_REJECTED

        if not inserted:
            return PersistResult.SKIPPED_DUPLICATE

        logger.info("contest_saved", url=link, title=entry.title)
        return PersistResult.INSERTED
