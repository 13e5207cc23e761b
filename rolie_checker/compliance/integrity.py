"""
Integrity walker over listed advisory documents.

Fetches every advisory of a listing once, checks its filename, media
type, JSON payload, tracking id and year folder, and hands the TLP label
found in the document to a caller supplied callback. Signature and hash
files are not verified.
"""
import logging
import re
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

import requests

from rolie_checker.ingestion.documents import AdvisoryFile
from rolie_checker.ingestion.http_client import HttpClient
from rolie_checker.observability.issues import IssueSink, Issues

from .errors import ContinueScan, InvalidURL
from .labels import TLPLabel, tlp_label
from .urls import absolute_url, file_name, resolve_url

logger = logging.getLogger(__name__)

CONFORMING_FILENAME = re.compile(r"^[+\-a-z0-9_]+\.json$")
YEAR_FOLDER = re.compile(r".*/(\d{4})/[^/]+$")
RELEASE_YEAR = re.compile(r"^(\d{4})-")
_TRACKING_ID_CHARS = re.compile(r"[^+\-a-z0-9]")

LabelCallback = Callable[[TLPLabel, str], None]


def tracking_id_filename(tracking_id: str) -> str:
    """Return the filename CSAF prescribes for ``tracking_id``."""
    return _TRACKING_ID_CHARS.sub("_", tracking_id.lower()) + ".json"


def _lookup(document: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(document, dict):
            return None
        document = document.get(key)
    return document


class IntegrityWalker:
    """
    Checks advisory documents listed by a feed.

    Each advisory is fetched at most once per listing kind (``mask``).
    When the same advisory shows up again, the label recorded on the first
    visit is passed to the callback without fetching the document again.
    """

    def __init__(self, client: HttpClient, issues: Issues):
        self.client = client
        self.issues = issues
        self._checked: Dict[Tuple[str, str], Optional[TLPLabel]] = {}

    def walk(
        self,
        files: Iterable[AdvisoryFile],
        base: str,
        mask: str,
        on_label: LabelCallback,
        sink: IssueSink,
    ) -> None:
        """
        Check all ``files`` of one listing.

        Args:
            files: Advisories as listed, URLs possibly relative
            base: Absolute directory URL the listing is relative to
            mask: Listing kind, e.g. "rolie"
            on_label: Called with (label, absolute advisory URL) for every
                advisory whose TLP label could be read
            sink: Where listing level problems are reported

        Raises:
            ContinueScan: If ``base`` is not a usable URL
        """
        try:
            absolute_url(base)
        except InvalidURL as exc:
            sink.error(f"Bad base path {base}: {exc}")
            raise ContinueScan(base) from exc

        for topic in (self.issues.invalid_advisories, self.issues.bad_filenames, self.issues.bad_folders):
            topic.use()

        for advisory in files:
            try:
                url = resolve_url(base, advisory.url)
            except InvalidURL as exc:
                sink.error(f"Bad URL {advisory.url}: {exc}")
                continue

            self.client.check_tls(url)

            key = (url, mask)
            if key in self._checked:
                label = self._checked[key]
            else:
                label = self._check_advisory(url, sink)
                self._checked[key] = label

            if label is not None:
                on_label(label, url)

    def _check_advisory(self, url: str, sink: IssueSink) -> Optional[TLPLabel]:
        name = file_name(url)
        if not CONFORMING_FILENAME.match(name):
            self.issues.bad_filenames.error(f"{url} does not have a conforming filename.")

        match = YEAR_FOLDER.match(url)
        folder_year = int(match.group(1)) if match else None

        try:
            response = self.client.get(url)
        except requests.RequestException as exc:
            sink.error(f"Fetching {url} failed: {exc}.")
            return None

        if response.status_code != requests.codes.ok:
            sink.error(f"Fetching {url} failed: Status code {response.status_code} ({response.reason})")
            return None

        content_type = response.headers.get("Content-Type", "")
        if content_type.split(";")[0].strip().lower() != "application/json":
            sink.warn(f"The content type of {url} should be 'application/json' but is '{content_type}'")

        try:
            document = response.json()
        except ValueError as exc:
            sink.error(f"Reading {url} failed: {exc}")
            return None

        if not isinstance(document, dict):
            self.issues.invalid_advisories.error(f"{url} is not a JSON object.")
            return None

        tracking_id = _lookup(document, "document", "tracking", "id")
        if not isinstance(tracking_id, str) or not tracking_id:
            self.issues.invalid_advisories.error(f"{url} has no /document/tracking/id.")
        else:
            expected = tracking_id_filename(tracking_id)
            if expected != name:
                self.issues.bad_filenames.error(
                    f"{url}: filename does not match tracking id {tracking_id!r} (expected {expected!r})."
                )

        self._check_year_folder(url, folder_year, _lookup(document, "document", "tracking", "initial_release_date"))

        raw_label = _lookup(document, "document", "distribution", "tlp", "label")
        if raw_label is None:
            self.issues.rolie_feed.error(
                f"Extracting 'tlp level' from {url} failed: no /document/distribution/tlp/label."
            )
            return None

        label = tlp_label(raw_label)
        logger.debug("Advisory %s is labeled TLP:%s", url, label)
        return label

    def _check_year_folder(self, url: str, folder_year: Optional[int], release_date: Any) -> None:
        folders = self.issues.bad_folders
        if folder_year is None:
            folders.error(f"No year folder found in {url}")
            return

        match = RELEASE_YEAR.match(release_date) if isinstance(release_date, str) else None
        if match is None:
            folders.error(f"Cannot determine the year of the initial release date {release_date!r} of {url}")
            return

        if int(match.group(1)) != folder_year:
            folders.error(
                f"Initial release date {release_date} of {url} does not match year folder {folder_year}."
            )
