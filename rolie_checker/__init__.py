"""
ROLIE feed checker for CSAF providers.

Checks that advisories are listed only in ROLIE feeds whose TLP label
permits them, that every populated TLP level has a feed listing all of
its advisories, and that the ROLIE service document matches the feeds
declared in provider-metadata.json.
"""

__version__ = "0.1.0"
