"""
ROLIE feed loader.

Fetches a ROLIE feed, validates it and extracts the advisory files it
lists. Failures that only affect this feed are reported to the
provider-metadata sink and signalled with ContinueScan.
"""
import logging
from typing import List, Optional

import requests

from rolie_checker.compliance.errors import ContinueScan
from rolie_checker.observability.issues import Issues

from .documents import AdvisoryFile, RolieEntry, RolieFeed, validate_rolie_feed
from .http_client import HttpClient

logger = logging.getLogger(__name__)


class RolieFeedLoader:
    """Loads the advisory listing of ROLIE feeds."""

    def __init__(self, client: HttpClient, issues: Issues):
        self.client = client
        self.issues = issues

    def fetch_feed_advisories(self, feed_url: str) -> List[AdvisoryFile]:
        """
        Fetch ``feed_url`` and return the advisories it lists.

        Args:
            feed_url: Absolute URL of the feed

        Returns:
            AdvisoryFile per entry with a "self" link; URLs are returned as
            written in the feed

        Raises:
            ContinueScan: If the feed cannot be fetched or decoded
        """
        sink = self.issues.provider_metadata

        try:
            response = self.client.get(feed_url)
        except requests.RequestException as exc:
            sink.error(f"Cannot fetch feed {feed_url}: {exc}")
            raise ContinueScan(feed_url) from exc

        if response.status_code != requests.codes.ok:
            sink.warn(
                f"Fetching {feed_url} failed. Status code {response.status_code} ({response.reason})"
            )
            raise ContinueScan(feed_url)

        try:
            document = response.json()
            feed = RolieFeed.from_dict(document)
        except ValueError as exc:
            sink.error(f"Loading ROLIE feed {feed_url} failed: {exc}.")
            raise ContinueScan(feed_url) from exc

        schema_errors = validate_rolie_feed(document)
        if schema_errors:
            sink.error(f"{feed_url}: Validating against JSON schema failed:")
            for message in schema_errors:
                sink.error(message)

        files = []
        for entry in feed.entries:
            advisory = self._advisory_file(feed_url, entry)
            if advisory is not None:
                files.append(advisory)

        logger.info("Feed %s lists %d advisories", feed_url, len(files))
        return files

    def _advisory_file(self, feed_url: str, entry: RolieEntry) -> Optional[AdvisoryFile]:
        sink = self.issues.provider_metadata
        url = None

        for link in entry.links:
            href = link.get("href")
            if link.get("rel") != "self" or not isinstance(href, str) or not href:
                continue
            if not href.lower().endswith(".json"):
                sink.warn(
                    f'ROLIE feed entry link {href} in {feed_url} with "rel": "self" '
                    f"has unexpected file extension."
                )
            url = href

        if url is None:
            sink.warn(f'ROLIE feed {feed_url} contains entry link with no "self" URL.')
            return None

        return AdvisoryFile(url=url)
