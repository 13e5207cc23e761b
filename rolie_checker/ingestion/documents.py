"""
Document models for the CSAF ROLIE distribution.

Covers the three JSON documents the checker reads besides the advisories
themselves:
- provider-metadata.json: the root document listing ROLIE feeds per
  distribution
- ROLIE feeds: Atom-style JSON listings of advisory documents
- the ROLIE service document: an index of feed URLs

Design decisions:
- Dataclasses built from already decoded JSON via from_dict()
- Only structure needed by the checks is modelled
- Structural problems raise DocumentError, schema conformance is reported
  separately through validate_*() so a slightly off document can still be
  checked
"""
import json
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator

SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schemas"


class DocumentError(ValueError):
    """Raised when a document does not have the expected structure."""


def _require_dict(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise DocumentError(f"{what} must be a JSON object, got {type(value).__name__}")
    return value


def _require_list(value: Any, what: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DocumentError(f"{what} must be a JSON array, got {type(value).__name__}")
    return value


@dataclass
class Feed:
    """A ROLIE feed as declared in the provider metadata."""
    url: Optional[str]
    tlp_label: Optional[str] = None  # None means the feed declares no label
    summary: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Feed":
        data = _require_dict(data, "feed")
        return cls(
            url=data.get("url") or None,
            tlp_label=data.get("tlp_label"),
            summary=data.get("summary"),
        )


@dataclass
class ProviderMetadata:
    """
    Parsed provider-metadata.json.

    ``feeds`` holds one collection of feeds per distribution that carries
    a ``rolie`` section, in document order.
    """
    canonical_url: Optional[str]
    feeds: List[List[Feed]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProviderMetadata":
        data = _require_dict(data, "provider metadata")
        feeds: List[List[Feed]] = []

        for dist in _require_list(data.get("distributions"), "distributions"):
            dist = _require_dict(dist, "distribution")
            rolie = dist.get("rolie")
            if not rolie:
                continue
            rolie = _require_dict(rolie, "rolie")
            collection = [
                Feed.from_dict(entry)
                for entry in _require_list(rolie.get("feeds"), "rolie.feeds")
            ]
            feeds.append(collection)

        return cls(
            canonical_url=data.get("canonical_url"),
            feeds=feeds,
        )

    def feed_urls(self) -> List[str]:
        """All declared feed URLs as written in the document."""
        return [feed.url for collection in self.feeds for feed in collection if feed.url]


@dataclass
class AdvisoryFile:
    """An advisory listed in a feed, URL as written in the feed."""
    url: str


@dataclass
class RolieEntry:
    id: Optional[str]
    title: Optional[str]
    published: Optional[str]
    updated: Optional[str]
    links: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RolieEntry":
        data = _require_dict(data, "feed entry")
        links = [
            _require_dict(link, "entry link")
            for link in _require_list(data.get("link"), "entry link")
        ]
        return cls(
            id=data.get("id"),
            title=data.get("title"),
            published=data.get("published"),
            updated=data.get("updated"),
            links=links,
        )


@dataclass
class RolieFeed:
    id: Optional[str]
    title: Optional[str]
    updated: Optional[str]
    entries: List[RolieEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RolieFeed":
        data = _require_dict(data, "ROLIE feed document")
        feed = _require_dict(data.get("feed"), "feed")
        return cls(
            id=feed.get("id"),
            title=feed.get("title"),
            updated=feed.get("updated"),
            entries=[
                RolieEntry.from_dict(entry)
                for entry in _require_list(feed.get("entry"), "feed.entry")
            ],
        )


@dataclass
class ServiceCollection:
    title: Optional[str]
    href: Optional[str]


@dataclass
class ServiceWorkspace:
    title: Optional[str]
    collections: List[ServiceCollection] = field(default_factory=list)


@dataclass
class ServiceDocument:
    """Parsed ROLIE service document."""
    workspaces: List[ServiceWorkspace] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceDocument":
        data = _require_dict(data, "ROLIE service document")
        service = _require_dict(data.get("service"), "service")
        workspaces = []
        for ws in _require_list(service.get("workspace"), "service.workspace"):
            ws = _require_dict(ws, "workspace")
            collections = []
            for col in _require_list(ws.get("collection"), "workspace.collection"):
                col = _require_dict(col, "collection")
                collections.append(ServiceCollection(title=col.get("title"), href=col.get("href")))
            workspaces.append(ServiceWorkspace(title=ws.get("title"), collections=collections))
        return cls(workspaces=workspaces)

    def feed_urls(self) -> List[str]:
        """All collection hrefs over all workspaces, in document order."""
        return [
            col.href
            for ws in self.workspaces
            for col in ws.collections
            if col.href
        ]


@lru_cache(maxsize=None)
def _validator(schema_name: str) -> Draft202012Validator:
    with open(SCHEMA_DIR / schema_name, "r", encoding="utf-8") as handle:
        schema = json.load(handle)
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def _validate(schema_name: str, document: Any) -> List[str]:
    errors = sorted(
        _validator(schema_name).iter_errors(document),
        key=lambda error: [str(part) for part in error.absolute_path],
    )
    messages = []
    for error in errors:
        location = "/".join(str(part) for part in error.absolute_path) or "<root>"
        messages.append(f"{location}: {error.message}")
    return messages


def validate_rolie_feed(document: Any) -> List[str]:
    """Validate a decoded ROLIE feed, returning schema error messages."""
    return _validate("rolie_feed.json", document)


def validate_service_document(document: Any) -> List[str]:
    """Validate a decoded ROLIE service document, returning schema error messages."""
    return _validate("rolie_service.json", document)
