"""
Tests for parsing and validating provider metadata, ROLIE feeds and
service documents.
"""
import pytest

from rolie_checker.ingestion.documents import (
    DocumentError,
    ProviderMetadata,
    RolieFeed,
    ServiceDocument,
    validate_rolie_feed,
    validate_service_document,
)

from conftest import BASE_URL, PMD_URL, provider_metadata, rolie_feed, service_document


class TestProviderMetadata:

    def test_feeds_grouped_per_distribution(self):
        data = provider_metadata(
            [("feed-white.json", "WHITE"), ("feed-unlabeled.json", None)],
            [("https://other.example.com/feed-red.json", "RED")],
        )

        metadata = ProviderMetadata.from_dict(data)

        assert len(metadata.feeds) == 2
        assert [f.url for f in metadata.feeds[0]] == ["feed-white.json", "feed-unlabeled.json"]
        assert metadata.feeds[0][0].tlp_label == "WHITE"
        assert metadata.feeds[0][1].tlp_label is None
        assert metadata.feeds[1][0].tlp_label == "RED"
        assert metadata.canonical_url == PMD_URL
        assert metadata.feed_urls() == [
            "feed-white.json",
            "feed-unlabeled.json",
            "https://other.example.com/feed-red.json",
        ]

    def test_distributions_without_rolie_are_skipped(self):
        data = {"distributions": [{"directory_url": "https://example.com/csaf/"}]}

        metadata = ProviderMetadata.from_dict(data)

        assert metadata.feeds == []

    def test_empty_feed_url_is_none(self):
        data = {"distributions": [{"rolie": {"feeds": [{"url": "", "tlp_label": "WHITE"}]}}]}

        metadata = ProviderMetadata.from_dict(data)

        assert metadata.feeds[0][0].url is None
        assert metadata.feed_urls() == []

    @pytest.mark.parametrize("data", [
        [],
        {"distributions": {}},
        {"distributions": [{"rolie": "feeds"}]},
        {"distributions": [{"rolie": {"feeds": ["feed.json"]}}]},
    ])
    def test_structural_errors(self, data):
        with pytest.raises(DocumentError):
            ProviderMetadata.from_dict(data)


class TestRolieFeed:

    def test_entries_are_parsed(self):
        feed = RolieFeed.from_dict(rolie_feed("feed-tlp-white", ["2024/a-2024-1.json"]))

        assert feed.id == "feed-tlp-white"
        [entry] = feed.entries
        assert entry.id == "a-2024-1"
        assert {"rel": "self", "href": "2024/a-2024-1.json"} in entry.links

    def test_missing_feed_object(self):
        with pytest.raises(DocumentError):
            RolieFeed.from_dict({"entry": []})

    def test_valid_feed_passes_schema(self):
        assert validate_rolie_feed(rolie_feed("feed", ["a.json"])) == []

    def test_schema_errors_are_reported_with_location(self):
        document = rolie_feed("feed", ["a.json"])
        del document["feed"]["id"]
        del document["feed"]["entry"][0]["content"]

        errors = validate_rolie_feed(document)

        assert any(e.startswith("feed:") and "'id'" in e for e in errors)
        assert any(e.startswith("feed/entry/0:") and "'content'" in e for e in errors)


class TestServiceDocument:

    def test_feed_urls_flatten_all_workspaces(self):
        data = service_document([BASE_URL + "a.json", BASE_URL + "b.json"])
        data["service"]["workspace"].append({
            "title": "More",
            "collection": [{"title": "C", "href": BASE_URL + "c.json"}],
        })

        document = ServiceDocument.from_dict(data)

        assert document.feed_urls() == [BASE_URL + "a.json", BASE_URL + "b.json", BASE_URL + "c.json"]

    def test_valid_service_document_passes_schema(self):
        assert validate_service_document(service_document([BASE_URL + "a.json"])) == []

    def test_empty_workspace_list_violates_schema(self):
        errors = validate_service_document({"service": {"workspace": []}})

        assert len(errors) == 1
        assert errors[0].startswith("service/workspace:")

    def test_missing_service_object(self):
        with pytest.raises(DocumentError):
            ServiceDocument.from_dict({"workspace": []})
