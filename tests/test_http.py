import logging
from urllib.parse import unquote

import pytest
import requests

from newsseo.core.exceptions import PingError
from newsseo.utils.http import MAX_TRIES, SitemapPinger

SITEMAP_URL = "https://news.example.com/sitemap.xml"


class FakeResponse:
    def __init__(self, status_code: int = 200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.headers = {}
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append(url)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture(autouse=True)
def no_backoff_sleep(monkeypatch):
    monkeypatch.setattr("time.sleep", lambda seconds: None)


def test_ping_formats_endpoint_with_encoded_sitemap_url():
    session = FakeSession([FakeResponse(200)])
    pinger = SitemapPinger(["https://ping.example.org/ping?sitemap={sitemap_url}"], session=session)

    assert pinger.ping_endpoint(pinger.endpoints[0], SITEMAP_URL) == 200
    assert session.calls[0].startswith("https://ping.example.org/ping?sitemap=https%3A%2F%2F")
    assert unquote(session.calls[0].split("=", 1)[1]) == SITEMAP_URL


def test_connection_errors_are_retried():
    session = FakeSession([requests.ConnectionError("down"), FakeResponse(200)])
    pinger = SitemapPinger(["https://ping.example.org/?s={sitemap_url}"], session=session)

    assert pinger.ping_all(SITEMAP_URL) == {"https://ping.example.org/?s={sitemap_url}": True}
    assert len(session.calls) == 2


def test_gives_up_after_max_tries():
    session = FakeSession([requests.Timeout("slow")] * MAX_TRIES)
    pinger = SitemapPinger(["https://ping.example.org/?s={sitemap_url}"], session=session)

    with pytest.raises(PingError):
        pinger.ping_endpoint(pinger.endpoints[0], SITEMAP_URL)
    assert len(session.calls) == MAX_TRIES


def test_http_errors_are_reported_without_retry(caplog):
    caplog.set_level(logging.ERROR, logger="newsseo.utils.http")
    session = FakeSession([FakeResponse(404), FakeResponse(200)])
    endpoints = ["https://gone.example.org/?s={sitemap_url}", "https://ok.example.org/?s={sitemap_url}"]

    results = SitemapPinger(endpoints, session=session).ping_all(SITEMAP_URL)

    assert results == {endpoints[0]: False, endpoints[1]: True}
    assert len(session.calls) == 2
    assert "Failed to ping https://gone.example.org" in caplog.text


def test_no_endpoints(caplog):
    caplog.set_level(logging.WARNING, logger="newsseo.utils.http")

    assert SitemapPinger([], session=FakeSession([])).ping_all(SITEMAP_URL) == {}
    assert "No ping endpoints configured" in caplog.text
