"""
Navigator strategies for category discovery.

Navigators handle the discovery phase - finding the category pages
of the site from its homepage.

Strategies:
- MenuNavigator: homepage menu → category pages
"""

from .base import NavigatorStrategy, SiteConfig
from .menu import MenuNavigator

__all__ = [
    "NavigatorStrategy",
    "SiteConfig",
    "MenuNavigator",
]
