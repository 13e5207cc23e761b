"""
TLP label checks for advisories listed in ROLIE feeds.

LabelInventory is owned by the feed compliance engine for the duration of
one scan. A LabelAccumulator is created per feed; it grades each advisory
against the feed's declared label and records the advisory in the shared
inventory under the advisory's own label. The completeness audit then
reads the inventory aggregated over all feeds.

Grading is asymmetric:
- advisory less restricted than its feed: info (unlabeled) or warning
- advisory more restricted than its feed: error, since the feed exposes
  it to a wider audience than its label allows
"""
from typing import Dict, List, Optional, Set

from rolie_checker.observability.issues import IssueSink

from .labels import ALL_LABELS, TLPLabel, tlp_label, tlp_rank


class LabelInventory:
    """Absolute advisory URLs grouped by the label found in the advisory."""

    def __init__(self):
        self._advisories: Dict[TLPLabel, Set[str]] = {}

    def record(self, label: TLPLabel, url: str) -> None:
        self._advisories.setdefault(tlp_label(label), set()).add(url)

    def advisories(self, label: TLPLabel) -> Set[str]:
        return self._advisories.get(tlp_label(label), set())

    def labels(self) -> List[TLPLabel]:
        """Labels with at least one recorded advisory, least restricted first."""
        return [label for label in ALL_LABELS if self._advisories.get(label)]

    def counts(self) -> Dict[str, int]:
        return {label.value: len(self._advisories.get(label, ())) for label in ALL_LABELS}

    def to_dict(self) -> Dict[str, List[str]]:
        return {label.value: sorted(self._advisories[label]) for label in self.labels()}

    def __len__(self) -> int:
        return sum(len(urls) for urls in self._advisories.values())


class LabelAccumulator:
    """Checks the advisories of one feed against the feed's TLP label."""

    def __init__(
        self,
        feed_url: str,
        feed_label: Optional[TLPLabel],
        inventory: LabelInventory,
        sink: IssueSink,
    ):
        self.feed_url = feed_url
        self.feed_label = tlp_label(feed_label)
        self.inventory = inventory
        self.sink = sink

    def classify(self, advisory_label: TLPLabel, advisory_url: str) -> None:
        """
        Record an advisory and report label mismatches with its feed.

        Args:
            advisory_label: Label found inside the advisory document
            advisory_url: Absolute URL of the advisory
        """
        advisory_label = tlp_label(advisory_label)
        advisory_rank = tlp_rank(advisory_label)
        feed_rank = tlp_rank(self.feed_label)

        # Recorded regardless of the outcome, the completeness audit needs it.
        self.inventory.record(advisory_label, advisory_url)

        if advisory_rank < feed_rank:
            if advisory_rank == 0:
                self.sink.info(
                    f"Found unlabeled advisory {advisory_url!r} in feed {self.feed_url!r}."
                )
            else:
                self.sink.warn(
                    f"Found advisory {advisory_url!r} labeled TLP:{advisory_label} "
                    f"in feed {self.feed_url!r} (TLP:{self.feed_label})."
                )
        elif advisory_rank > feed_rank:
            self.sink.error(
                f"{advisory_url} of TLP level {advisory_label} must not be listed "
                f"in feed {self.feed_url} of TLP level {self.feed_label}."
            )
