"""Listing page fetcher.

Retrieves the job board HTML with a single GET (redirects followed, explicit timeout,
no retries) and parses it into a BeautifulSoup tree. Every failure mode is raised as
a FetchError subclass; the scraping service treats them all as "no live results".

Config (runtime.yml / env):

  jobscraper_base_url: https://jobs.techstars.com/jobs
  jobscraper_user_agent: Mozilla/5.0 ...
  jobscraper_fetch_timeout: 30
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from ..errors import FetchHTTPError, FetchNetworkError, FetchTimeoutError
from ..settings import SETTINGS


@dataclass
class PageSource:
    url: Optional[str] = None
    user_agent: Optional[str] = None
    timeout: Optional[float] = None
    name: str = "techstars"

    def __post_init__(self):
        self.url = self.url or SETTINGS.base_url
        self.user_agent = self.user_agent or SETTINGS.user_agent
        if self.timeout is None:
            self.timeout = SETTINGS.fetch_timeout

    def fetch_html(self) -> str:
        headers = {"User-Agent": self.user_agent, "Accept": "text/html,application/xhtml+xml"}
        try:
            with httpx.Client(timeout=self.timeout, headers=headers, follow_redirects=True) as client:
                resp = client.get(self.url)
        except httpx.TimeoutException as e:
            raise FetchTimeoutError(f"Timed out after {self.timeout}s fetching {self.url}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchNetworkError(f"Network error fetching {self.url}: {e}") from e
        status = resp.status_code
        if not 200 <= status < 300:
            raise FetchHTTPError(status, f"Upstream error {status} fetching {self.url}")
        return resp.text

    def fetch(self) -> BeautifulSoup:
        return BeautifulSoup(self.fetch_html(), "html.parser")
