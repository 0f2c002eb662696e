"""Shared fixtures: a fake HTTP layer so no test touches the network."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
import requests
from requests.structures import CaseInsensitiveDict

REDIRECT_CODES = (301, 302, 303, 307, 308)


class DummyResponse:
    def __init__(self, url, status_code=200, text="", headers=None, content=None):
        self.url = url
        self.status_code = status_code
        self.text = text
        self.headers = CaseInsensitiveDict(headers or {})
        self.content = content if content is not None else text.encode("utf-8")
        self.closed = False

    @property
    def is_redirect(self):
        return "location" in self.headers and self.status_code in REDIRECT_CODES

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i : i + chunk_size]

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


@pytest.fixture
def fake_http(monkeypatch):
    """Route `requests.Session.get` to canned responses.

    Unknown URLs raise `requests.ConnectionError`, like an unreachable host.
    """
    routes = {}
    calls = []

    def add(url, status_code=200, text="", headers=None, content=None):
        routes[url] = DummyResponse(url, status_code, text, headers, content)
        return routes[url]

    def fail(url, exc):
        routes[url] = exc

    def _get(self, url, **kwargs):
        calls.append((url, kwargs))
        handler = routes.get(url)
        if handler is None:
            raise requests.ConnectionError(f"no route to {url}")
        if isinstance(handler, Exception):
            raise handler
        return handler

    monkeypatch.setattr(requests.Session, "get", _get)
    return SimpleNamespace(add=add, fail=fail, routes=routes, calls=calls)
