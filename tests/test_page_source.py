import httpx
import pytest
from bs4 import BeautifulSoup

from jobscraper.harvest.errors import FetchError, FetchHTTPError, FetchNetworkError, FetchTimeoutError
from jobscraper.harvest.sources.page_source import PageSource

URL = "https://jobs.techstars.com/jobs"


class DummyResp:
    def __init__(self, status_code: int, text: str = ""):
        self.status_code = status_code
        self.text = text


class DummyClient:
    def __init__(self, outcome, **kwargs):
        self.outcome = outcome
        self.kwargs = kwargs
        self.urls = []
    def __enter__(self):
        return self
    def __exit__(self, exc_type, exc, tb):
        return False
    def get(self, url):
        self.urls.append(url)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def install(monkeypatch, outcome):
    created = []
    def factory(**kwargs):
        c = DummyClient(outcome, **kwargs)
        created.append(c)
        return c
    monkeypatch.setattr("httpx.Client", factory)
    return created


def test_fetch_happy(monkeypatch):
    created = install(monkeypatch, DummyResp(200, '<div class="job-card">Acme Backend Engineer</div>'))
    src = PageSource(url=URL, user_agent="pytest-agent", timeout=5)
    doc = src.fetch()
    assert isinstance(doc, BeautifulSoup)
    assert doc.select_one(".job-card").get_text() == "Acme Backend Engineer"
    client = created[0]
    assert client.urls == [URL]
    assert client.kwargs["timeout"] == 5
    assert client.kwargs["follow_redirects"] is True
    assert client.kwargs["headers"]["User-Agent"] == "pytest-agent"


@pytest.mark.parametrize("status", [403, 404, 503])
def test_fetch_http_error(monkeypatch, status):
    install(monkeypatch, DummyResp(status, "nope"))
    with pytest.raises(FetchHTTPError) as ei:
        PageSource(url=URL).fetch()
    assert ei.value.status == status
    assert str(status) in ei.value.message


def test_fetch_timeout(monkeypatch):
    install(monkeypatch, httpx.ReadTimeout("slow"))
    with pytest.raises(FetchTimeoutError):
        PageSource(url=URL, timeout=0.1).fetch()


def test_fetch_network_error(monkeypatch):
    install(monkeypatch, httpx.ConnectError("refused"))
    with pytest.raises(FetchNetworkError) as ei:
        PageSource(url=URL).fetch_html()
    assert isinstance(ei.value, FetchError)
    assert isinstance(ei.value.__cause__, httpx.ConnectError)


def test_defaults_come_from_settings():
    src = PageSource()
    assert src.url.startswith("http")
    assert src.user_agent
    assert src.timeout > 0


@pytest.mark.parametrize("error", [
    httpx.InvalidURL("no host"),
    httpx.UnsupportedProtocol("ftp not supported"),
    httpx.TooManyRedirects("loop"),
])
def test_every_httpx_failure_is_a_fetch_error(monkeypatch, error):
    install(monkeypatch, error)
    with pytest.raises(FetchNetworkError) as ei:
        PageSource(url=URL).fetch()
    assert ei.value.__cause__ is error
