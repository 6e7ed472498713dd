"""
Normalization utilities for 12gewinn.de listing data.

Handles:
- Relative -> absolute URL resolution
- German case folding for keyword matching (A-Z plus umlauts)
- Deadline dates (31.12.2025, 1.1.2026) as end-of-day local time
"""

import re
from datetime import datetime, tzinfo
from typing import Optional, Union
from urllib.parse import urlsplit
from zoneinfo import ZoneInfo

import structlog

logger = structlog.get_logger(__name__)


SITE_TIMEZONE = "Europe/Berlin"

# Uppercase letters folded for keyword matching
_FOLD_TABLE = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZÄÖÜ",
    "abcdefghijklmnopqrstuvwxyzäöü",
)

_ABSOLUTE_URL = re.compile(r"^https?://", re.IGNORECASE)

# D.M.YYYY or DD.MM.YYYY
_DATE_PATTERN = re.compile(r"\b(\d{1,2})\.(\d{1,2})\.(\d{4})\b")


def normalize_url(base: str, href: str, strict_root: bool = True) -> str:
    """
    Resolve a possibly relative href against a base URL.

    Rules:
    - empty href -> base unchanged
    - http(s) URL -> returned verbatim
    - "/path" -> scheme://host of base + path
    - anything else -> base without trailing slash + "/" + href

    Args:
        base: Absolute URL of the page the href was found on
        href: Raw href attribute value
        strict_root: Resolve root-relative hrefs against scheme and host.
                     When False, the legacy behaviour of appending the
                     href to the whole base URL is used.

    Returns:
        Absolute URL
    """
    href = (href or "").strip()
    if not href:
        return base

    if _ABSOLUTE_URL.match(href):
        return href

    if href.startswith("/"):
        if not strict_root:
            return base.rstrip("/") + href
        parts = urlsplit(base)
        scheme = parts.scheme or "https"
        return f"{scheme}://{parts.netloc}{href}"

    return base.rstrip("/") + "/" + href.lstrip("/")


def normalize_whitespace(text: Optional[str]) -> str:
    """Collapse runs of whitespace into single spaces and strip."""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def fold_text(text: Optional[str]) -> str:
    """
    Fold text for keyword matching.

    Maps A-Z and the German umlauts to lowercase; other characters are
    left untouched.
    """
    if not text:
        return ""
    return text.translate(_FOLD_TABLE)


def contains_keyword(text: Optional[str], keywords: Union[str, list[str]]) -> bool:
    """Check whether folded text contains any of the (lowercase) keywords."""
    if isinstance(keywords, str):
        keywords = [keywords]
    folded = fold_text(normalize_whitespace(text))
    return any(keyword in folded for keyword in keywords)


def _resolve_timezone(tz: Union[str, tzinfo, None]) -> tzinfo:
    if tz is None:
        return ZoneInfo(SITE_TIMEZONE)
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def extract_deadline(
    text: Optional[str],
    tz: Union[str, tzinfo, None] = SITE_TIMEZONE,
) -> Optional[datetime]:
    """
    Extract a deadline date from free text.

    The first D.M.YYYY / DD.MM.YYYY date is used. Deadlines are inclusive,
    so the time is fixed to 23:59:59 in the site's timezone.

    Args:
        text: Text such as "Einsendeschluss: 31.12.2025"
        tz: Timezone name or tzinfo (default Europe/Berlin)

    Returns:
        Timezone-aware datetime or None if no valid date was found
    """
    if not text:
        return None

    match = _DATE_PATTERN.search(text)
    if not match:
        return None

    day, month, year = (int(g) for g in match.groups())
    try:
        return datetime(year, month, day, 23, 59, 59, tzinfo=_resolve_timezone(tz))
    except ValueError as e:
        logger.warning("invalid_date", text=match.group(0), error=str(e))
        return None


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """
    Convert a deadline to the naive local date-time stored in the database.

    Aware values keep their wall-clock time; the zone is dropped.
    """
    if value is None:
        return None
    return value.replace(tzinfo=None)
