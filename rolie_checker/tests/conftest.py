"""
Shared pytest fixtures for ROLIE checker tests.

This module provides an in-memory HTTP client and builders for the JSON
documents a CSAF provider serves, so tests can describe a provider site
without touching the network.
"""
import json
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest
import requests

from rolie_checker.ingestion.http_client import HttpClient
from rolie_checker.observability.issues import Issues

BASE_URL = "https://example.com/.well-known/csaf/"
PMD_URL = BASE_URL + "provider-metadata.json"

_REASONS = {200: "OK", 403: "Forbidden", 404: "Not Found", 500: "Internal Server Error"}


def make_response(
    url: str,
    status: int = 200,
    payload: Any = None,
    body: Optional[bytes] = None,
    content_type: str = "application/json",
) -> requests.Response:
    """Build a real requests.Response without network access."""
    response = requests.Response()
    response.status_code = status
    response.reason = _REASONS.get(status, "Error")
    response.url = url
    response.encoding = "utf-8"
    if body is None:
        body = json.dumps(payload).encode("utf-8") if payload is not None else b""
    response._content = body
    response.headers["Content-Type"] = content_type
    return response


class FakeHttpClient(HttpClient):
    """HttpClient serving canned responses; unknown URLs answer 404."""

    def __init__(self):
        super().__init__()
        self.routes: Dict[str, Any] = {}
        self.requested: List[str] = []

    def add_json(self, url: str, payload: Any, status: int = 200, content_type: str = "application/json"):
        self.routes[url] = make_response(url, status=status, payload=payload, content_type=content_type)

    def add_body(self, url: str, body: bytes, status: int = 200, content_type: str = "application/json"):
        self.routes[url] = make_response(url, status=status, body=body, content_type=content_type)

    def add_error(self, url: str, error: Exception):
        self.routes[url] = error

    def get(self, url: str) -> requests.Response:
        self.requested.append(url)
        route = self.routes.get(url)
        if route is None:
            return make_response(url, status=404, body=b"not found", content_type="text/plain")
        if isinstance(route, Exception):
            raise route
        return route


def csaf_advisory(
    tracking_id: str,
    label: Optional[str],
    release_date: str = "2024-01-15T10:00:00.000Z",
) -> Dict[str, Any]:
    """Minimal CSAF advisory document."""
    document: Dict[str, Any] = {
        "category": "csaf_base",
        "csaf_version": "2.0",
        "title": f"Advisory {tracking_id}",
        "publisher": {
            "category": "vendor",
            "name": "Example Vendor",
            "namespace": "https://example.com",
        },
        "tracking": {
            "id": tracking_id,
            "status": "final",
            "version": "1",
            "initial_release_date": release_date,
            "current_release_date": release_date,
            "revision_history": [
                {"date": release_date, "number": "1", "summary": "Initial version."}
            ],
        },
    }
    if label is not None:
        document["distribution"] = {"tlp": {"label": label}}
    return {"document": document}


def rolie_feed(feed_id: str, advisory_urls: Sequence[str]) -> Dict[str, Any]:
    """ROLIE feed document listing ``advisory_urls``."""
    entries = []
    for url in advisory_urls:
        name = url.rsplit("/", 1)[-1]
        entries.append({
            "id": name[:-len(".json")] if name.endswith(".json") else name,
            "title": name,
            "link": [
                {"rel": "self", "href": url},
                {"rel": "hash", "href": url + ".sha256"},
                {"rel": "hash", "href": url + ".sha512"},
                {"rel": "signature", "href": url + ".asc"},
            ],
            "published": "2024-01-15T10:00:00Z",
            "updated": "2024-01-15T10:00:00Z",
            "content": {"type": "application/json", "src": url},
            "format": {
                "schema": "https://docs.oasis-open.org/csaf/csaf/v2.0/csaf_json_schema.json",
                "version": "2.0",
            },
        })
    return {
        "feed": {
            "id": feed_id,
            "title": f"Feed {feed_id}",
            "link": [{"rel": "self", "href": BASE_URL + feed_id + ".json"}],
            "category": [{"scheme": "urn:ietf:params:rolie:category:information-type", "term": "csaf"}],
            "updated": "2024-01-15T10:00:00Z",
            "entry": entries,
        }
    }


def provider_metadata(*collections: Sequence[Tuple[str, Optional[str]]]) -> Dict[str, Any]:
    """Provider metadata with one distribution per collection of (url, label) feeds."""
    distributions = []
    for collection in collections:
        feeds = []
        for url, label in collection:
            feed = {"summary": f"Feed {url}", "url": url}
            if label is not None:
                feed["tlp_label"] = label
            feeds.append(feed)
        distributions.append({"rolie": {"feeds": feeds}})
    return {
        "canonical_url": PMD_URL,
        "distributions": distributions,
        "metadata_version": "2.0",
        "publisher": {"category": "vendor", "name": "Example Vendor", "namespace": "https://example.com"},
        "role": "csaf_provider",
    }


def service_document(hrefs: Sequence[str]) -> Dict[str, Any]:
    return {
        "service": {
            "workspace": [
                {
                    "title": "Example CSAF feeds",
                    "collection": [
                        {"title": f"Feed {href}", "href": href, "categories": {"category": []}}
                        for href in hrefs
                    ],
                }
            ]
        }
    }


class ProviderSite:
    """Describes the documents served by a fake CSAF provider."""

    base_url = BASE_URL
    pmd_url = PMD_URL

    def __init__(self):
        self.client = FakeHttpClient()

    def url(self, path: str) -> str:
        return BASE_URL + path

    def add_advisory(self, path: str, tracking_id: str, label: Optional[str], **kwargs) -> str:
        url = self.url(path)
        self.client.add_json(url, csaf_advisory(tracking_id, label, **kwargs))
        return url

    def add_feed(self, feed_id: str, advisory_urls: Sequence[str]) -> str:
        url = self.url(feed_id + ".json")
        self.client.add_json(url, rolie_feed(feed_id, advisory_urls))
        return url

    def add_provider_metadata(self, *collections):
        self.client.add_json(PMD_URL, provider_metadata(*collections))

    def add_service_document(self, hrefs: Sequence[str]):
        self.client.add_json(self.url("service.json"), service_document(hrefs))


@pytest.fixture
def issues():
    """Fresh issue sinks for one test."""
    return Issues()


@pytest.fixture
def fake_client():
    return FakeHttpClient()


@pytest.fixture
def site():
    """
    Empty provider site.

    Returns:
        ProviderSite whose ``client`` serves whatever the test adds
    """
    return ProviderSite()


@pytest.fixture
def green_amber_site(site):
    """
    Provider with a TLP:GREEN and a TLP:AMBER feed.

    The GREEN feed lists X (GREEN) and Y (AMBER); the AMBER feed lists Y.
    Y is listed by absolute URL in one feed and relative in the other.
    """
    site.x_url = site.add_advisory("2024/x-2024-0001.json", "X-2024-0001", "GREEN")
    site.y_url = site.add_advisory("2024/y-2024-0002.json", "Y-2024-0002", "AMBER")
    site.green_feed = site.add_feed("feed-tlp-green", ["2024/x-2024-0001.json", site.y_url])
    site.amber_feed = site.add_feed("feed-tlp-amber", ["2024/y-2024-0002.json"])
    site.add_provider_metadata([
        ("feed-tlp-green.json", "GREEN"),
        (site.amber_feed, "AMBER"),
    ])
    site.add_service_document([site.green_feed, site.amber_feed])
    return site
