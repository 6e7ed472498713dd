"""
Gewinn Scraper - contest importer for 12gewinn.de.

Architecture:
- core/: Stable foundation (models, HTTP client, normalizers, selectors, gate)
- navigators/: Discovery of category pages from the homepage menu
- parsers/: Extraction of contest entries from category pages
- config/: YAML-driven site, HTTP and store settings
- storage: SQLAlchemy-backed contest store
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
