"""
Shared fixtures: an in-memory stand-in for the Supabase posts table, a fake
trophy client, and the gateway app wired to both.
"""
from __future__ import annotations

import os
import sys
from itertools import count

import httpx
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from blog_api.app import create_app
from blog_api.config import Settings
from blog_api.errors import TrophyFetchError
from blog_api.store import StoreError, StoreResult

ALLOWED_ORIGIN = "http://localhost:5173"
BASE_URL = "https://api.example.test"


class FakeTable:
    def __init__(self, backend: "FakeBackend", token):
        self.backend = backend
        self.token = token

    def _match(self, filters):
        filters = filters or {}
        return [row for row in self.backend.rows if all(str(row.get(k)) == str(v) for k, v in filters.items())]

    def _result(self, rows, single):
        if self.backend.error is not None:
            return StoreResult(error=self.backend.error)
        if single:
            if len(rows) != 1:
                return StoreResult(error=StoreError("JSON object requested, multiple (or no) rows returned", status=406))
            return StoreResult(data=rows[0])
        return StoreResult(data=rows)

    def select(self, columns="*", filters=None, single=False):
        self.backend.calls.append(("select", self.token, filters))
        return self._result(self._match(filters), single)

    def insert(self, rows, single=False):
        self.backend.calls.append(("insert", self.token, rows))
        created = []
        for row in rows:
            created.append({"id": str(next(self.backend.ids)), "publish_date": "2025-03-01", **row})
        if self.backend.error is None:
            self.backend.rows.extend(created)
        return self._result(created, single)

    def update(self, values, filters, single=False):
        self.backend.calls.append(("update", self.token, dict(values)))
        rows = self._match(filters)
        if self.backend.error is None:
            for row in rows:
                row.update(values)
        return self._result(rows, single)

    def delete(self, filters, single=False):
        self.backend.calls.append(("delete", self.token, filters))
        rows = self._match(filters)
        if self.backend.error is None:
            self.backend.rows = [row for row in self.backend.rows if row not in rows]
        return self._result(rows, single)


class FakeClient:
    def __init__(self, backend, token):
        self.backend = backend
        self.access_token = token

    def table(self, name):
        assert name == "posts"
        return FakeTable(self.backend, self.access_token)


class FakeBackend:
    def __init__(self, rows=None):
        self.rows = list(rows or [])
        self.calls = []
        self.error = None
        self.ids = count(100)

    def factory(self, access_token):
        return FakeClient(self, access_token)


class FakeTrophyClient:
    def __init__(self, svg="<svg>trophies</svg>", fail=False):
        self.svg = svg
        self.fail = fail
        self.usernames = []

    def fetch(self, username):
        self.usernames.append(username)
        if self.fail:
            raise TrophyFetchError("Failed to fetch trophies from GitHub Profile Trophy.")
        return self.svg


class PostgrestTransport(httpx.MockTransport):
    """Answers SDK traffic in-process: records requests, replies with a canned status and JSON body."""

    def __init__(self, status=200, payload=None, exc=None):
        self.status = status
        self.payload = [] if payload is None else payload
        self.exc = exc
        self.requests = []
        super().__init__(self.handle)

    def handle(self, request):
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return httpx.Response(self.status, json=self.payload)


@pytest.fixture
def settings():
    return Settings(
        supabase_url="https://project.supabase.test",
        supabase_anon_key="anon-key",
        base_url=BASE_URL,
    )


@pytest.fixture
def backend():
    return FakeBackend(
        rows=[
            {"id": "1", "title": "Getting Started", "content": "Hello", "author": "Josh", "publish_date": "2025-02-08"},
            {"id": "2", "title": "Performance", "content": "Fast", "author": None, "publish_date": None},
        ]
    )


@pytest.fixture
def trophies():
    return FakeTrophyClient()


@pytest.fixture
def app(settings, backend, trophies):
    app = create_app(settings, store_factory=backend.factory, trophy_client=trophies)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c
