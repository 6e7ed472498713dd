"""
Data models for the contest importer.

Transient extraction records and pipeline result types. The persisted
record lives in ``gewinn_scraper.storage``.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Optional


class ContestStatus(str, Enum):
    """Lifecycle state of a stored contest."""
    PLANNED = "geplant"  # Newly imported, not yet worked on


class PersistResult(str, Enum):
    """Outcome of offering a candidate to the persist gate."""
    SKIPPED_NO_LINK = "skipped_no_link"
    SKIPPED_INTERNAL = "skipped_internal"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    SKIPPED_REJECTED = "skipped_rejected"  # Store refused the record
    INSERTED = "inserted"


@dataclass
class CandidateEntry:
    """
    One contest entry extracted from an item block.

    Every field is best-effort; a block without heading, link or
    deadline text still yields a candidate.
    """

    title: Optional[str] = None
    participation_url: Optional[str] = None
    deadline: Optional[datetime] = None  # tz-aware, end of day

    # Category page the block was found on
    source_url: Optional[str] = None

    @property
    def has_link(self) -> bool:
        return bool(self.participation_url)

    def to_dict(self) -> dict:
        data = {}
        for k, v in asdict(self).items():
            if isinstance(v, datetime):
                data[k] = v.isoformat()
            elif v is not None:
                data[k] = v
        return data


@dataclass
class ImportStats:
    """Counters collected during one import run."""
    menu_links: int = 0
    pages_failed: int = 0
    candidates: int = 0
    inserted: int = 0
    skipped_no_link: int = 0
    skipped_internal: int = 0
    skipped_duplicate: int = 0
    skipped_rejected: int = 0

    def record(self, result: PersistResult) -> None:
        """Count a gate outcome."""
        name = result.value
        setattr(self, name, getattr(self, name) + 1)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ImportReport:
    """Result of a full import run: counters plus the progress lines emitted."""
    stats: ImportStats = field(default_factory=ImportStats)
    lines: list[str] = field(default_factory=list)
    inserted_links: list[str] = field(default_factory=list)
