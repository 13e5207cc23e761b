"""
Observability layer for the ROLIE feed checker.

This module provides the issue sinks diagnostics are reported into,
metrics collection, and Markdown reporting for checker runs.

Main exports:
- Issues / IssueSink: Severity graded diagnostics per requirement
- ScanMetrics: Tracks metrics for a checker run
- ScanReporter: Generates Markdown reports
"""
from .issues import Issues, IssueSink, Message, MessageType
from .metrics import ScanMetrics
from .reporter import ScanReporter

__all__ = [
    "Issues",
    "IssueSink",
    "Message",
    "MessageType",
    "ScanMetrics",
    "ScanReporter",
]
