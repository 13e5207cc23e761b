"""
ROLIE service document reconciliation.

The service document is expected next to provider-metadata.json and must
list exactly the feeds the provider metadata declares. This check is
independent of the feed compliance engine.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import requests

from rolie_checker.ingestion.documents import (
    Feed,
    ServiceDocument,
    validate_service_document,
)
from rolie_checker.ingestion.http_client import HttpClient
from rolie_checker.observability.issues import Issues

from .errors import InvalidURL
from .set_utils import symmetric_difference
from .urls import absolute_url, base_url, resolve_url

logger = logging.getLogger(__name__)

SERVICE_DOCUMENT_NAME = "service.json"


@dataclass
class ServiceCheckResult:
    """
    Feed URLs that differ between the service document and the metadata.

    Attributes:
        nonexistent: Listed by the service document, absent from the metadata
        missing: Declared in the metadata, absent from the service document
    """
    nonexistent: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return not self.nonexistent and not self.missing


class ServiceDocumentReconciler:
    """Compares the ROLIE service document with the declared feeds."""

    def __init__(self, pmd_url: str, client: HttpClient, issues: Issues):
        self.pmd_url = absolute_url(pmd_url)
        self.client = client
        self.issues = issues

    @property
    def service_url(self) -> str:
        return base_url(self.pmd_url) + SERVICE_DOCUMENT_NAME

    def check(self, feeds: Sequence[Sequence[Feed]]) -> Optional[ServiceCheckResult]:
        """
        Fetch the service document and reconcile it with ``feeds``.

        Returns:
            ServiceCheckResult, or None if the service document could not
            be loaded (already reported)
        """
        sink = self.issues.rolie_service
        sink.use()
        url = self.service_url

        document = self._load(url)
        if document is None:
            return None

        service_feeds = self._resolve_all(document.feed_urls(), "service document")
        metadata_feeds = self._resolve_all(
            [feed.url for collection in feeds for feed in collection if feed.url],
            "provider metadata",
        )

        nonexistent, missing = symmetric_difference(service_feeds, metadata_feeds)
        if nonexistent:
            sink.error(f"The ROLIE service document contains nonexistent feed entries: {nonexistent}")
        if missing:
            sink.error(f"The ROLIE service document is missing feed entries: {missing}")

        return ServiceCheckResult(nonexistent=nonexistent, missing=missing)

    def _load(self, url: str) -> Optional[ServiceDocument]:
        sink = self.issues.rolie_service

        try:
            response = self.client.get(url)
        except requests.RequestException as exc:
            sink.error(f"Cannot fetch rolie service document {url}: {exc}")
            return None

        if response.status_code != requests.codes.ok:
            sink.warn(f"Fetching {url} failed. Status code {response.status_code} ({response.reason})")
            return None

        try:
            raw = response.json()
            document = ServiceDocument.from_dict(raw)
        except ValueError as exc:
            sink.error(f"Loading ROLIE service document failed: {exc}.")
            return None

        for message in validate_service_document(raw):
            sink.error(f"{url}: {message}")

        return document

    def _resolve_all(self, urls: Sequence[str], origin: str) -> List[str]:
        resolved = []
        for url in urls:
            try:
                resolved.append(resolve_url(self.pmd_url, url))
            except InvalidURL as exc:
                if origin == "service document":
                    self.issues.rolie_service.error(f"Invalid feed URL {url} in service document: {exc}")
                else:
                    logger.warning("Ignoring invalid feed URL %s from %s: %s", url, origin, exc)
        return resolved
