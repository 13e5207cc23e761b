"""
Tests for reconciling the ROLIE service document with declared feeds.
"""
import pytest
import requests

from rolie_checker.compliance.service_check import ServiceDocumentReconciler
from rolie_checker.ingestion.documents import Feed
from rolie_checker.observability.issues import MessageType

from conftest import BASE_URL, PMD_URL

SERVICE_URL = BASE_URL + "service.json"


@pytest.fixture
def reconciler(site, issues):
    return ServiceDocumentReconciler(PMD_URL, site.client, issues)


def declared(*urls):
    return [[Feed(url=url, tlp_label="WHITE") for url in urls]]


def test_service_url_sits_next_to_provider_metadata(reconciler):
    assert reconciler.service_url == SERVICE_URL


def test_matching_feeds_are_consistent(site, reconciler, issues):
    site.add_service_document([BASE_URL + "a.json", BASE_URL + "b.json"])

    result = reconciler.check(declared(BASE_URL + "b.json", BASE_URL + "a.json"))

    assert result.consistent
    assert issues.rolie_service.messages == []
    assert issues.rolie_service.used


def test_relative_and_absolute_references_are_equal(site, reconciler, issues):
    site.add_service_document(["a.json", BASE_URL + "b.json"])

    result = reconciler.check(declared(BASE_URL + "a.json", "b.json"))

    assert result.consistent
    assert issues.rolie_service.messages == []


def test_dot_segments_in_absolute_hrefs_do_not_cause_mismatches(site, reconciler, issues):
    site.add_service_document([BASE_URL + "white/../feed-green.json", BASE_URL + "./feed-amber.json"])

    result = reconciler.check(declared("feed-green.json", BASE_URL + "feed-amber.json"))

    assert result.consistent
    assert issues.rolie_service.messages == []


def test_differences_are_reported_both_ways(site, reconciler, issues):
    site.add_service_document([BASE_URL + "a.json", BASE_URL + "b.json"])

    result = reconciler.check(declared(BASE_URL + "a.json", BASE_URL + "c.json"))

    assert result.nonexistent == [BASE_URL + "b.json"]
    assert result.missing == [BASE_URL + "c.json"]
    errors = issues.rolie_service.texts(MessageType.ERROR)
    assert len(errors) == 2
    assert errors[0].startswith("The ROLIE service document contains nonexistent feed entries")
    assert BASE_URL + "b.json" in errors[0]
    assert errors[1].startswith("The ROLIE service document is missing feed entries")
    assert BASE_URL + "c.json" in errors[1]


def test_feeds_from_all_collections_are_compared(site, reconciler):
    site.add_service_document([BASE_URL + "a.json", BASE_URL + "b.json"])

    result = reconciler.check([[Feed(BASE_URL + "a.json", "WHITE")], [Feed(BASE_URL + "b.json", "RED")]])

    assert result.consistent


def test_missing_service_document_warns(reconciler, issues):
    assert reconciler.check(declared(BASE_URL + "a.json")) is None

    [warning] = issues.rolie_service.texts(MessageType.WARN)
    assert "Status code 404" in warning
    assert issues.rolie_service.texts(MessageType.ERROR) == []


def test_unreachable_service_document_is_an_error(site, reconciler, issues):
    site.client.add_error(SERVICE_URL, requests.ConnectionError("connection reset"))

    assert reconciler.check(declared(BASE_URL + "a.json")) is None

    [error] = issues.rolie_service.texts(MessageType.ERROR)
    assert error.startswith("Cannot fetch rolie service document")


def test_undecodable_service_document_is_an_error(site, reconciler, issues):
    site.client.add_body(SERVICE_URL, b"<service/>")

    assert reconciler.check(declared(BASE_URL + "a.json")) is None

    [error] = issues.rolie_service.texts(MessageType.ERROR)
    assert error.startswith("Loading ROLIE service document failed")


def test_schema_violations_do_not_stop_reconciliation(site, reconciler, issues):
    document = {"service": {"workspace": [{"collection": [{"title": "A", "href": BASE_URL + "a.json"}]}]}}
    site.client.add_json(SERVICE_URL, document)

    result = reconciler.check(declared(BASE_URL + "a.json"))

    assert result.consistent
    [error] = issues.rolie_service.texts(MessageType.ERROR)
    assert error.startswith(SERVICE_URL + ": ")
    assert "'title' is a required property" in error


def test_invalid_service_href_is_reported(site, reconciler, issues):
    site.add_service_document([BASE_URL + "a.json", "bad href.json"])

    result = reconciler.check(declared(BASE_URL + "a.json"))

    assert result.consistent
    [error] = issues.rolie_service.texts(MessageType.ERROR)
    assert "Invalid feed URL bad href.json" in error
