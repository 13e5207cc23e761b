"""
Generate human-readable scan reports in Markdown format.

This module provides ScanReporter, which turns ScanMetrics and the issue
sinks of a run into a Markdown report.

Report sections:
- Header with run metadata (ID, provider, duration)
- Summary table with core counts
- TLP inventory with advisories per label and summary feed coverage
- Requirements table with a pass/fail status per checked requirement
- Messages of every requirement that reported something

Design decisions:
- Uses tabulate for GitHub-flavored tables
- Requirements that were never checked are listed but not marked failed
- Reports saved with timestamp for historical tracking
"""
from datetime import datetime, timezone
from pathlib import Path

from tabulate import tabulate

from .issues import Issues, MessageType
from .metrics import ScanMetrics

_MARKERS = {
    MessageType.INFO: "info",
    MessageType.WARN: "warning",
    MessageType.ERROR: "error",
}


class ScanReporter:
    """Generates Markdown reports from checker runs."""

    def generate_report(self, metrics: ScanMetrics, issues: Issues) -> str:
        """
        Generate full scan report in Markdown format.

        Args:
            metrics: ScanMetrics of the completed run
            issues: Issue sinks the run reported into

        Returns:
            Markdown-formatted report as string
        """
        lines = []

        # Header
        lines.append("# ROLIE Feed Check Report")
        lines.append(f"**Run ID:** {metrics.run_id}")
        lines.append(f"**Provider metadata:** {metrics.provider_metadata_url}")
        lines.append(f"**Started:** {metrics.started_at.isoformat()}")
        if metrics.completed_at:
            duration = (metrics.completed_at - metrics.started_at).total_seconds()
            lines.append(f"**Duration:** {duration:.1f} seconds")
        lines.append("")

        # Summary table
        lines.append("## Summary")
        summary_data = [
            ["Feeds Declared", metrics.feeds_total],
            ["Feeds Fetched", metrics.feeds_fetched],
            ["Advisories", metrics.advisories_total],
            ["Errors", metrics.messages.get("error", 0)],
            ["Warnings", metrics.messages.get("warn", 0)],
            ["Infos", metrics.messages.get("info", 0)],
        ]
        lines.append(tabulate(summary_data, headers=["Metric", "Value"], tablefmt="github"))
        lines.append("")

        # TLP inventory
        if metrics.label_counts:
            lines.append("## TLP Inventory")
            label_data = []
            for label, count in metrics.label_counts.items():
                covered = "✓" if label in metrics.summarized_labels else ("✗" if count else "-")
                label_data.append([f"TLP:{label}", count, covered])
            lines.append(tabulate(label_data, headers=["Label", "Advisories", "Summary Feed"], tablefmt="github"))
            lines.append("")

        # Requirements
        lines.append("## Requirements")
        requirement_data = []
        for sink in issues.all():
            if not sink.used:
                status = "not checked"
            else:
                status = "✗" if sink.has_errors() else "✓"
            counts = sink.counts()
            requirement_data.append([
                status,
                sink.requirement,
                sink.description,
                counts["error"],
                counts["warn"],
                counts["info"],
            ])
        lines.append(tabulate(
            requirement_data,
            headers=["Status", "Req", "Requirement", "Errors", "Warnings", "Infos"],
            tablefmt="github",
        ))
        lines.append("")

        # Messages
        for sink in issues.all():
            if not sink.messages:
                continue
            lines.append(f"### Requirement {sink.requirement}: {sink.description}")
            for message in sink.messages:
                lines.append(f"- **{_MARKERS[message.type]}:** {message.text}")
            lines.append("")

        return "\n".join(lines)

    def save_report(self, report: str, output_dir: Path) -> Path:
        """
        Save report to file with timestamp.

        Args:
            report: Markdown report content
            output_dir: Directory to save report in

        Returns:
            Path to saved report file
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        filepath = output_dir / f"check-report-{timestamp}.md"
        filepath.write_text(report, encoding="utf-8")
        return filepath
