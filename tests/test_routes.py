"""
Routing table, CORS on every branch, auxiliary handlers and the last-resort 500.
"""
from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from blog_api.app import ROOT_MESSAGE, create_app
from blog_api.cors import PREFLIGHT_VARY
from blog_api.sitemap import SITEMAP_NS, STATIC_PAGES

from conftest import ALLOWED_ORIGIN, BASE_URL

NS = {"sm": SITEMAP_NS}


def _assert_cors(response, origin=ALLOWED_ORIGIN):
    assert response.headers["Access-Control-Allow-Origin"] == origin
    assert response.headers["Access-Control-Allow-Credentials"] == "true"
    assert response.headers["Access-Control-Allow-Methods"] == "GET, POST, OPTIONS"
    assert response.headers["Access-Control-Max-Age"] == "86400"


def test_root_status_message(client):
    r = client.get("/", headers={"Origin": ALLOWED_ORIGIN})
    assert r.status_code == 200
    assert r.get_json() == {"message": ROOT_MESSAGE}
    _assert_cors(r)
    assert r.headers["Vary"] == "Origin"


@pytest.mark.parametrize("method", ["GET", "POST", "PUT", "DELETE"])
def test_health_any_method(client, method):
    r = client.open("/health", method=method)
    assert r.status_code == 200
    assert r.get_data(as_text=True) == "OK"
    assert "Access-Control-Allow-Origin" not in r.headers


@pytest.mark.parametrize("method", ["TRACE", "PROPFIND", "PATCH", "OPTIONS"])
def test_health_accepts_uncommon_methods(client, method):
    r = client.open("/health", method=method, headers={"Origin": ALLOWED_ORIGIN})
    assert r.status_code == 200
    assert r.get_data(as_text=True) == "OK"
    _assert_cors(r)


@pytest.mark.parametrize("method", ["TRACE", "MKCOL", "DELETE"])
def test_root_accepts_uncommon_methods(client, method):
    r = client.open("/", method=method)
    assert r.status_code == 200
    assert r.get_json() == {"message": ROOT_MESSAGE}


def test_health_with_allowed_origin(client):
    r = client.get("/health", headers={"Origin": ALLOWED_ORIGIN})
    assert r.status_code == 200
    assert r.get_data(as_text=True) == "OK"
    _assert_cors(r)


def test_graphql_preflight(client):
    r = client.options(
        "/graphql",
        headers={
            "Origin": ALLOWED_ORIGIN,
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type, authorization",
        },
    )
    assert r.status_code == 204
    assert r.get_data() == b""
    _assert_cors(r)
    assert r.headers["Vary"] == PREFLIGHT_VARY
    assert r.headers["Access-Control-Allow-Headers"] == "content-type, authorization"


def test_graphql_get_is_method_not_allowed(client):
    r = client.get("/graphql", headers={"Origin": ALLOWED_ORIGIN})
    assert r.status_code == 405
    assert r.get_data(as_text=True) == "Method Not Allowed"
    _assert_cors(r)
    assert "POST" in r.headers["Allow"]


def test_sitemap_post_is_method_not_allowed(client):
    r = client.post("/sitemap", headers={"Origin": ALLOWED_ORIGIN})
    assert r.status_code == 405
    _assert_cors(r)


def test_sitemap_options_is_method_not_allowed(client):
    r = client.options("/sitemap")
    assert r.status_code == 405


def test_unknown_path_is_not_found_with_cors(client):
    r = client.get("/nope", headers={"Origin": ALLOWED_ORIGIN})
    assert r.status_code == 404
    assert r.get_data(as_text=True) == "Not Found"
    _assert_cors(r)


def test_unknown_path_from_foreign_origin(client):
    r = client.get("/nope", headers={"Origin": "https://elsewhere.example"})
    assert r.status_code == 404
    assert "Access-Control-Allow-Origin" not in r.headers
    assert r.headers["Vary"] == "Origin"


def test_sitemap_lists_static_pages_and_posts(client, backend):
    r = client.get("/sitemap", headers={"Origin": ALLOWED_ORIGIN})
    assert r.status_code == 200
    assert r.headers["Content-Type"].startswith("application/xml")
    _assert_cors(r)

    root = ET.fromstring(r.data)
    urls = root.findall("sm:url", NS)
    assert len(urls) == len(STATIC_PAGES) + len(backend.rows)

    locs = [url.find("sm:loc", NS).text for url in urls]
    assert all(loc.startswith(BASE_URL) for loc in locs)
    assert f"{BASE_URL}/blog/1" in locs
    assert f"{BASE_URL}/blog/2" in locs

    by_loc = {url.find("sm:loc", NS).text: url for url in urls}
    assert by_loc[f"{BASE_URL}/blog/1"].find("sm:lastmod", NS).text == "2025-02-08"
    assert by_loc[f"{BASE_URL}/blog/1"].find("sm:priority", NS).text == "0.6"
    # posts without a publish date fall back to today's date
    assert len(by_loc[f"{BASE_URL}/blog/2"].find("sm:lastmod", NS).text) == 10


def test_sitemap_reads_posts_anonymously(client, backend):
    client.get("/sitemap", headers={"Authorization": "Bearer user-token"})
    assert backend.calls == [("select", None, None)]


def test_last_resort_error_keeps_cors(settings, trophies):
    def broken_store(access_token):
        raise RuntimeError("backend unreachable")

    app = create_app(settings, store_factory=broken_store, trophy_client=trophies)
    app.config["TESTING"] = True
    with app.test_client() as c:
        r = c.get("/sitemap", headers={"Origin": ALLOWED_ORIGIN})

    assert r.status_code == 500
    assert r.get_data(as_text=True) == "Internal Server Error"
    _assert_cors(r)


def test_sitemap_store_failure_is_internal_error(client, backend):
    from blog_api.store import StoreError

    backend.error = StoreError("permission denied for table posts")
    r = client.get("/sitemap")
    assert r.status_code == 500
    assert r.get_data(as_text=True) == "Internal Server Error"
    assert r.headers["Vary"] == "Origin"
