"""
Feed compliance engine.

Walks all ROLIE feeds announced in the provider metadata in three phases:
1. Fetch: load the advisory listing of every feed
2. Label check: run the integrity walker over each listing and grade the
   TLP label of every advisory against its feed's label
3. Completeness: verify that every TLP level with advisories has at least
   one feed listing all of them, and that a publicly accessible feed
   exists

Design decisions:
- Feeds are identified by (collection index, feed index) so identical
  feed declarations stay distinct
- A feed that fails in phase 1 is left out of phases 2 and 3
- One LabelInventory is created per scan and shared by the per-feed
  LabelAccumulators; phase 3 reads this aggregated inventory
- ContinueScan skips a feed, any other exception aborts the scan
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from rolie_checker.ingestion.documents import AdvisoryFile, Feed
from rolie_checker.observability.issues import Issues

from .errors import ContinueScan, InvalidURL
from .label_checker import LabelAccumulator, LabelInventory
from .labels import ALL_LABELS, TLPLabel, is_public, tlp_label
from .set_utils import contains_all_keys
from .urls import absolute_url, base_url, resolve_url

logger = logging.getLogger(__name__)

ROLIE_MASK = "rolie"

FeedKey = Tuple[int, int]


@dataclass
class FeedScanResult:
    """Outcome of one run over the ROLIE feeds."""
    feeds_total: int = 0
    fetched: Dict[FeedKey, List[AdvisoryFile]] = field(default_factory=dict)
    inventory: LabelInventory = field(default_factory=LabelInventory)
    summarized: Set[TLPLabel] = field(default_factory=set)
    has_public_feed: bool = False


class FeedComplianceEngine:
    """
    Checks TLP labeling and completeness of a provider's ROLIE feeds.

    Collaborators are injected:
    - client: provides check_tls(url)
    - loader: provides fetch_feed_advisories(url), raising ContinueScan
    - walker: provides walk(files, base, mask, on_label, sink)
    """

    def __init__(self, pmd_url: str, client, loader, walker, issues: Issues):
        """
        Raises:
            InvalidURL: If ``pmd_url`` is not an absolute http(s) URL
        """
        self.pmd_url = absolute_url(pmd_url)
        self.client = client
        self.loader = loader
        self.walker = walker
        self.issues = issues

    def process_feeds(self, feeds: Sequence[Sequence[Feed]]) -> FeedScanResult:
        """
        Run all three phases over ``feeds``.

        Args:
            feeds: One sequence of feeds per distribution

        Returns:
            FeedScanResult with the fetched listings and the label inventory
        """
        self.issues.rolie_feed.use()
        result = FeedScanResult(feeds_total=sum(1 for _ in self._iter_feeds(feeds)))

        logger.info("Phase 1: Fetching %d ROLIE feeds", result.feeds_total)
        result.fetched = self._fetch_feeds(feeds)

        logger.info("Phase 2: Checking TLP labels of %d feeds", len(result.fetched))
        result.inventory = self._check_labels(feeds, result.fetched)

        logger.info("Phase 3: Checking completeness")
        result.summarized, result.has_public_feed = self._check_completeness(
            feeds, result.fetched, result.inventory
        )
        return result

    @staticmethod
    def _iter_feeds(feeds: Sequence[Sequence[Feed]]) -> Iterator[Tuple[FeedKey, Feed]]:
        for i, collection in enumerate(feeds):
            for j, feed in enumerate(collection):
                if feed.url:
                    yield (i, j), feed

    def _feed_url(self, feed: Feed) -> Optional[str]:
        try:
            return resolve_url(self.pmd_url, feed.url)
        except InvalidURL as exc:
            self.issues.provider_metadata.error(f"Invalid URL {feed.url} in feed: {exc}.")
            return None

    def _fetch_feeds(self, feeds: Sequence[Sequence[Feed]]) -> Dict[FeedKey, List[AdvisoryFile]]:
        fetched: Dict[FeedKey, List[AdvisoryFile]] = {}

        for key, feed in self._iter_feeds(feeds):
            feed_url = self._feed_url(feed)
            if feed_url is None:
                continue

            self.client.check_tls(feed_url)

            try:
                files = self.loader.fetch_feed_advisories(feed_url)
            except ContinueScan:
                logger.info("Skipping feed %s", feed_url)
                continue

            fetched[key] = files

        return fetched

    def _check_labels(
        self,
        feeds: Sequence[Sequence[Feed]],
        fetched: Dict[FeedKey, List[AdvisoryFile]],
    ) -> LabelInventory:
        inventory = LabelInventory()

        for key, feed in self._iter_feeds(feeds):
            if key not in fetched:
                continue

            feed_url = self._feed_url(feed)
            if feed_url is None:
                continue
            try:
                feed_base = base_url(feed_url)
            except InvalidURL as exc:
                self.issues.provider_metadata.error(f"Bad base path: {exc}")
                continue

            accumulator = LabelAccumulator(
                feed_url=feed_url,
                feed_label=tlp_label(feed.tlp_label),
                inventory=inventory,
                sink=self.issues.rolie_feed,
            )

            try:
                self.walker.walk(
                    fetched[key],
                    feed_base,
                    ROLIE_MASK,
                    accumulator.classify,
                    self.issues.provider_metadata,
                )
            except ContinueScan:
                logger.info("Integrity check of feed %s skipped", feed_url)

        return inventory

    def _check_completeness(
        self,
        feeds: Sequence[Sequence[Feed]],
        fetched: Dict[FeedKey, List[AdvisoryFile]],
        inventory: LabelInventory,
    ) -> Tuple[Set[TLPLabel], bool]:
        summarized: Set[TLPLabel] = set()
        has_public = False

        for key, feed in self._iter_feeds(feeds):
            if key not in fetched:
                continue

            feed_url = self._feed_url(feed)
            if feed_url is None:
                continue

            label = tlp_label(feed.tlp_label)
            if is_public(label):
                has_public = True

            feed_base = base_url(feed_url)
            listed = set()
            for advisory in fetched[key]:
                try:
                    listed.add(resolve_url(feed_base, advisory.url))
                except InvalidURL as exc:
                    self.issues.provider_metadata.error(
                        f"Invalid URL {advisory.url} in feed {feed_url}: {exc}."
                    )

            if contains_all_keys(inventory.advisories(label), listed):
                summarized.add(label)

        if not has_public:
            self.issues.rolie_feed.error(
                "One ROLIE feed with a TLP:WHITE, TLP:GREEN or unlabeled tlp must exist, "
                "but none were found."
            )

        # Every TLP level with data needs at least one summary feed.
        for label in ALL_LABELS:
            if label not in summarized and inventory.advisories(label):
                self.issues.rolie_feed.warn(
                    f"ROLIE feed for TLP:{label} has no accessible listed feed covering all advisories."
                )

        return summarized, has_public
