"""End-to-end tests: homepage -> category pages -> store."""

from datetime import datetime

import httpx
import pytest

from gewinn_scraper import __main__ as cli
from gewinn_scraper import orchestrator
from gewinn_scraper.config.loader import AppConfig
from gewinn_scraper.core.http_client import HttpClient
from gewinn_scraper.navigators.base import SiteConfig
from gewinn_scraper.orchestrator import ContestImporter
from gewinn_scraper.storage import ContestStore

from pages import BASE_URL, CATEGORY_HTML, make_transport

KAT1_URL = f"{BASE_URL}/kat1"

SINGLE_MENU_HTML = '<ul><li class="Menu2"><a href="/kat1">Reisen</a></li></ul>'

HOMEPAGE_TWO_CATEGORIES = """
<ul>
    <li class="Menu2"><a href="/kat1">Reisen</a></li>
    <li class="Menu2"><a href="/kat2">Technik</a></li>
</ul>
"""


def run_import(app_config, store, pages, **kwargs):
    """Helper to run one import against canned pages."""
    importer = ContestImporter(
        config=app_config,
        store=store,
        http_client=HttpClient(transport=make_transport(pages)),
        **kwargs,
    )
    return importer.run()


class TestContestImporter:
    """Tests for ContestImporter.run."""

    def test_single_category(self, app_config, store):
        """Test the two-block category page stores exactly one contest."""
        pages = {BASE_URL: SINGLE_MENU_HTML, KAT1_URL: CATEGORY_HTML}

        report = run_import(app_config, store, pages)

        assert store.count() == 1
        record = store.get_by_link("https://extern.example/win1")
        assert record.description == "Traumreise nach Mallorca"
        assert record.ends_at == datetime(2026, 1, 1, 23, 59, 59)
        assert record.status == "geplant"

        assert report.lines[0] == "Crawling category page: https://www.12gewinn.de/kat1"
        assert "Saved: https://extern.example/win1 (deadline: 2026-01-01)" in report.lines
        assert report.inserted_links == ["https://extern.example/win1"]

        stats = report.stats
        assert stats.menu_links == 1
        assert stats.candidates == 2
        assert stats.inserted == 1
        assert stats.skipped_no_link == 1

    def test_rerun_is_idempotent(self, app_config, store):
        """Test a second run over unchanged pages inserts nothing."""
        pages = {BASE_URL: SINGLE_MENU_HTML, KAT1_URL: CATEGORY_HTML}

        run_import(app_config, store, pages)
        report = run_import(app_config, store, pages)

        assert store.count() == 1
        assert report.stats.inserted == 0
        assert report.stats.skipped_duplicate == 1
        assert not any(line.startswith("Saved:") for line in report.lines)

    def test_same_link_on_two_pages(self, app_config, store):
        """Test a contest listed in two categories is stored once."""
        pages = {
            BASE_URL: HOMEPAGE_TWO_CATEGORIES,
            KAT1_URL: CATEGORY_HTML,
            f"{BASE_URL}/kat2": CATEGORY_HTML,
        }

        report = run_import(app_config, store, pages)

        assert store.count() == 1
        assert report.stats.menu_links == 2
        assert report.stats.inserted == 1
        assert report.stats.skipped_duplicate == 1

    def test_failed_category_page_continues(self, app_config, store):
        """Test a failing page is skipped and the next one still runs."""
        pages = {
            BASE_URL: HOMEPAGE_TWO_CATEGORIES,
            KAT1_URL: httpx.ConnectError("connection refused"),
            f"{BASE_URL}/kat2": CATEGORY_HTML,
        }

        report = run_import(app_config, store, pages)

        assert report.stats.pages_failed == 1
        assert store.exists_by_link("https://extern.example/win1")
        assert report.lines[:2] == [
            "Crawling category page: https://www.12gewinn.de/kat1",
            "Crawling category page: https://www.12gewinn.de/kat2",
        ]

    def test_unreachable_homepage(self, app_config, store):
        """Test an unreachable homepage still ends with a summary line."""
        report = run_import(app_config, store, {BASE_URL: 500})

        assert store.count() == 0
        assert report.lines == [
            "Import from www.12gewinn.de finished: "
            "0 category pages, 0 entries, 0 saved, 0 already known"
        ]

    def test_internal_links_filtered(self, app_config, store):
        """Test participation links into the site itself are not stored."""
        category = """
        <div class="Item">
            <h2>Intern</h2>
            <p class="DivRechtsButton"><a href="/gewinnspiel/7">Los</a></p>
        </div>
        """
        pages = {BASE_URL: SINGLE_MENU_HTML, KAT1_URL: category}

        report = run_import(app_config, store, pages)

        assert store.count() == 0
        assert report.stats.skipped_internal == 1

    def test_internal_links_kept_without_filter(self, store):
        """Test disabling the filter stores internal links."""
        config = AppConfig(site=SiteConfig(base_url=BASE_URL, filter_internal_links=False))
        category = """
        <div class="Item">
            <p class="DivRechtsButton"><a href="/gewinnspiel/7">Los</a></p>
        </div>
        """
        pages = {BASE_URL: SINGLE_MENU_HTML, KAT1_URL: category}

        run_import(config, store, pages)

        assert store.exists_by_link("https://www.12gewinn.de/gewinnspiel/7")

    def test_saved_line_without_deadline(self, app_config, store):
        """Test contests without deadline are saved without suffix."""
        category = """
        <div class="Item">
            <h2>Ohne Datum</h2>
            <a href="https://extern.example/nodate">Zum Gewinnspiel</a>
        </div>
        """
        pages = {BASE_URL: SINGLE_MENU_HTML, KAT1_URL: category}

        report = run_import(app_config, store, pages)

        assert "Saved: https://extern.example/nodate" in report.lines
        assert store.get_by_link("https://extern.example/nodate").ends_at is None

    def test_line_sink(self, app_config, store):
        """Test progress lines are passed to the sink in order."""
        pages = {BASE_URL: SINGLE_MENU_HTML, KAT1_URL: CATEGORY_HTML}
        received = []

        report = run_import(app_config, store, pages, line_sink=received.append)

        assert received == report.lines
        assert received[-1] == (
            "Import from www.12gewinn.de finished: "
            "1 category pages, 2 entries, 1 saved, 0 already known"
        )

    def test_dry_run(self, app_config, store):
        """Test a dry run reports but does not insert."""
        pages = {BASE_URL: SINGLE_MENU_HTML, KAT1_URL: CATEGORY_HTML}

        report = run_import(app_config, store, pages, dry_run=True)

        assert store.count() == 0
        assert report.stats.inserted == 1
        assert "Would save: https://extern.example/win1 (deadline: 2026-01-01)" in report.lines
        assert not any(line.startswith("Saved:") for line in report.lines)
        assert report.lines[-1].startswith("Dry run from www.12gewinn.de finished:")

    def test_overlong_link_does_not_abort(self, app_config, store):
        """Test a link too long for the store is skipped and the run goes on."""
        category = f"""
        <div class="Item">
            <p class="DivRechtsButton"><a href="https://extern.example/{'x' * 900}">Los</a></p>
        </div>
        <div class="Item">
            <p class="DivRechtsButton"><a href="https://extern.example/ok">Los</a></p>
        </div>
        """
        pages = {BASE_URL: SINGLE_MENU_HTML, KAT1_URL: category}

        report = run_import(app_config, store, pages)

        assert report.stats.skipped_rejected == 1
        assert report.inserted_links == ["https://extern.example/ok"]
        assert report.lines[-1].startswith("Import from www.12gewinn.de finished:")

    def test_requests_in_order(self, app_config, store):
        """Test pages are fetched one after another in menu order."""
        transport = make_transport({
            BASE_URL: HOMEPAGE_TWO_CATEGORIES,
            KAT1_URL: CATEGORY_HTML,
            f"{BASE_URL}/kat2": "<html><body></body></html>",
        })
        importer = ContestImporter(
            config=app_config,
            store=store,
            http_client=HttpClient(transport=transport),
        )

        importer.run()

        # httpx versions differ on the trailing slash of a bare host
        assert [str(r.url).rstrip("/") for r in transport.requests] == [
            "https://www.12gewinn.de",
            "https://www.12gewinn.de/kat1",
            "https://www.12gewinn.de/kat2",
        ]


class TestCli:
    """Tests for the command line entry point."""

    @pytest.fixture
    def fake_site(self, monkeypatch):
        """Route the importer's HTTP client to canned pages."""
        transport = make_transport({BASE_URL: SINGLE_MENU_HTML, KAT1_URL: CATEGORY_HTML})

        def build_client(**kwargs):
            return HttpClient(transport=transport, **kwargs)

        monkeypatch.setattr(orchestrator, "HttpClient", build_client)
        monkeypatch.delenv("DATABASE_URL", raising=False)
        return transport

    def test_parse_args_defaults(self):
        """Test defaults of the argument parser."""
        args = cli.parse_args([])

        assert args.config is None
        assert args.dry_run is False
        assert args.init_db is False
        assert args.log_level == "INFO"

    def test_apply_overrides(self, app_config):
        """Test command line values replace configured ones."""
        args = cli.parse_args([
            "--base-url", "https://staging.12gewinn.de",
            "--db-url", "sqlite:///contests.db",
            "--db-password", "",
            "--no-internal-filter",
            "--lenient-root-urls",
        ])
        app_config.store.password = "old"

        config = cli.apply_overrides(app_config, args)

        assert config.site.base_url == "https://staging.12gewinn.de"
        assert config.site.filter_internal_links is False
        assert config.site.strict_root_urls is False
        assert config.store.url == "sqlite:///contests.db"
        assert config.store.password == ""

    def test_run_imports(self, fake_site, tmp_path, capsys):
        """Test a full run creates the table and prints progress lines."""
        db_url = f"sqlite:///{tmp_path / 'contests.db'}"
        args = cli.parse_args(["--db-url", db_url, "--init-db"])

        assert cli.run(args) == cli.EXIT_OK

        out = capsys.readouterr().out
        assert "Crawling category page: https://www.12gewinn.de/kat1" in out
        assert "Saved: https://extern.example/win1 (deadline: 2026-01-01)" in out
        assert ContestStore.from_url(db_url).exists_by_link("https://extern.example/win1")

    def test_run_store_unavailable(self, fake_site, tmp_path):
        """Test an unreachable store exits with status 2 before crawling."""
        db_url = f"sqlite:///{tmp_path / 'missing' / 'contests.db'}"
        args = cli.parse_args(["--db-url", db_url])

        assert cli.run(args) == cli.EXIT_CONFIG_ERROR
        assert fake_site.requests == []

    def test_run_missing_config(self, tmp_path):
        """Test a missing config file exits with status 2."""
        args = cli.parse_args(["--config", str(tmp_path / "missing.yml")])

        assert cli.run(args) == cli.EXIT_CONFIG_ERROR

    def test_version(self, capsys):
        """Test --version prints the version and exits."""
        with pytest.raises(SystemExit) as exc:
            cli.main(["--version"])

        assert exc.value.code == 0
        assert "gewinn-scraper" in capsys.readouterr().out
