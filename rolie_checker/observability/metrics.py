"""
Metrics collection for checker runs.

This module provides ScanMetrics, a dataclass that tracks the observable
outcome of one scan of a provider:
- How many ROLIE feeds were declared and how many could be fetched
- How many advisories were seen per TLP label
- Which TLP labels have a feed listing all their advisories
- Message counts per severity across all issue sinks

Design decisions:
- Single metrics object per run for simplicity
- Filled by the orchestrator from engine results and issue sinks, so the
  compliance components stay free of bookkeeping
- Serializable to_dict() for JSON output
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class ScanMetrics:
    """
    Metrics for a single checker run.

    Tracks feed and advisory counts, TLP inventory sizes and diagnostics.
    """
    run_id: str
    provider_metadata_url: str
    started_at: datetime
    completed_at: Optional[datetime] = None

    # Core counts
    feeds_total: int = 0
    feeds_fetched: int = 0
    advisories_total: int = 0
    errors: int = 0

    # Advisories per TLP label as found in the documents
    # Key: label value (e.g. "WHITE"), Value: count
    label_counts: Dict[str, int] = field(default_factory=dict)

    # Labels with at least one feed listing all of their advisories
    summarized_labels: List[str] = field(default_factory=list)

    service_checked: bool = False

    # Key: severity ("info" | "warn" | "error"), Value: count
    messages: Dict[str, int] = field(default_factory=lambda: {"info": 0, "warn": 0, "error": 0})

    def record_issues(self, issues) -> None:
        """
        Sum up the messages of all issue sinks.

        Args:
            issues: Issues bundle the run reported into
        """
        totals = {"info": 0, "warn": 0, "error": 0}
        for sink in issues.all():
            for severity, count in sink.counts().items():
                totals[severity] += count
        self.messages = totals
        self.errors = totals["error"]

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert metrics to dictionary for JSON serialization.

        Returns:
            Dictionary representation with ISO formatted timestamps
        """
        return {
            "run_id": self.run_id,
            "provider_metadata_url": self.provider_metadata_url,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "feeds_total": self.feeds_total,
            "feeds_fetched": self.feeds_fetched,
            "advisories_total": self.advisories_total,
            "errors": self.errors,
            "label_counts": dict(self.label_counts),
            "summarized_labels": list(self.summarized_labels),
            "service_checked": self.service_checked,
            "messages": dict(self.messages),
        }
