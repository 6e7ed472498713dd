"""
Parser strategies for contest extraction.

Parsers handle the extraction phase - converting category pages into
CandidateEntry records.

Strategies:
- CategoryPageParser: item blocks on a 12gewinn.de category page
"""

from .base import ParserStrategy
from .category_page import CategoryPageParser

__all__ = [
    "ParserStrategy",
    "CategoryPageParser",
]
