"""
Error types used while scanning a provider's feeds.

Recoverable per-feed failures are signalled with ContinueScan after a
diagnostic has already been written to an issue sink. Anything else that
escapes a phase is treated as fatal and aborts the scan.
"""


class ScanError(Exception):
    """Base class for checker errors."""


class ContinueScan(ScanError):
    """Raised when the current feed or check should be skipped."""


class InvalidURL(ScanError, ValueError):
    """Raised when a URL cannot be parsed or resolved."""
