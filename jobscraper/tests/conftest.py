"""Global pytest fixtures.
 - Sets env vars to disable logging side effects.
 - Provides isolated sqlite stores, test settings and canned page sources.
"""
from __future__ import annotations
import os
from pathlib import Path
import pytest

from jobscraper.harvest.db import JobDB
from jobscraper.harvest.errors import FetchNetworkError
from jobscraper.harvest.settings import Settings

BASE_URL = "https://jobs.techstars.com/jobs"

LISTING_HTML = """
<html><head><title>Jobs</title></head><body>
<nav><a href="/about">About us</a></nav>
<section class="results">
  <a class="job-card" href="/companies/nimbus/jobs/101">Nimbus Senior Backend Engineer Remote</a>
  <a class="job-card" href="https://jobs.techstars.com/companies/orbit/jobs/202">Orbit Frontend Developer Boston</a>
  <a class="job-card" href="/companies/acme/jobs/303">Acme Platform Engineer New York</a>
  <a class="job-card" href="/companies/nimbus/jobs/101">Nimbus Senior Backend Engineer Remote</a>
</section>
</body></html>
"""


@pytest.fixture(autouse=True, scope="session")
def test_env_setup():
    os.environ.setdefault('JOBSCRAPER_DISABLE_FILE_LOGS', '1')
    os.environ.setdefault('JOBSCRAPER_DISABLE_EVENTS', '1')
    yield


class StaticSource:
    def __init__(self, html: str):
        self.html = html
        self.calls = 0

    def fetch(self):
        self.calls += 1
        return self.html


class FailingSource:
    def fetch(self):
        raise FetchNetworkError("connection refused")


def make_settings(tmp_path: Path, **overrides) -> Settings:
    values = dict(
        base_url=BASE_URL,
        user_agent="pytest",
        fetch_timeout=1.0,
        max_jobs_per_scrape=15,
        fallback_enabled=True,
        db_path=tmp_path / "jobs.sqlite",
        export_dir=tmp_path / "exports",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def db(tmp_path):
    store = JobDB(tmp_path / "jobs.sqlite")
    yield store
    store.close()


@pytest.fixture
def listing_source():
    return StaticSource(LISTING_HTML)


@pytest.fixture
def failing_source():
    return FailingSource()


@pytest.fixture
def settings_factory(tmp_path):
    def _make(**overrides):
        return make_settings(tmp_path, **overrides)
    return _make


@pytest.fixture
def page_source_factory():
    return StaticSource
