"""Shared fixtures: site config, fake HTTP clients and an in-memory store."""

import pytest

from gewinn_scraper.config.loader import AppConfig
from gewinn_scraper.core.http_client import HttpClient
from gewinn_scraper.navigators.base import SiteConfig
from gewinn_scraper.storage import ContestStore

from pages import BASE_URL, make_transport


@pytest.fixture
def site():
    """Default site configuration."""
    return SiteConfig(base_url=BASE_URL)


@pytest.fixture
def app_config(site):
    """Default configuration pointing at the test site."""
    return AppConfig(site=site)


@pytest.fixture
def store():
    """Empty in-memory SQLite contest store."""
    store = ContestStore.from_url("sqlite://")
    store.create_schema()
    return store


@pytest.fixture
def client_factory():
    """Create HttpClients backed by canned pages."""
    def factory(pages: dict) -> HttpClient:
        return HttpClient(transport=make_transport(pages))
    return factory


@pytest.fixture
def transport_factory():
    """Create mock transports serving canned pages."""
    return make_transport
