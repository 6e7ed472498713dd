"""
Core layer - stable foundation for the importer.

Components:
- models: CandidateEntry, PersistResult, ImportStats
- http_client: Blocking HTTP client with timeouts and error reporting
- selectors: HTML parsing and query helpers
- normalizer: URL resolution, German text folding, deadline dates
- deduplicator: Dedup/persist gate
"""

from .models import (
    CandidateEntry,
    ContestStatus,
    PersistResult,
    ImportStats,
    ImportReport,
)
from .normalizer import (
    normalize_url,
    normalize_whitespace,
    fold_text,
    contains_keyword,
    extract_deadline,
    to_local_naive,
)
from .selectors import Selector, parse_html, element_text, load_document
from .http_client import HttpClient, FetchResult
from .deduplicator import Deduplicator

__all__ = [
    "CandidateEntry",
    "ContestStatus",
    "PersistResult",
    "ImportStats",
    "ImportReport",
    "normalize_url",
    "normalize_whitespace",
    "fold_text",
    "contains_keyword",
    "extract_deadline",
    "to_local_naive",
    "Selector",
    "parse_html",
    "element_text",
    "load_document",
    "HttpClient",
    "FetchResult",
    "Deduplicator",
]
