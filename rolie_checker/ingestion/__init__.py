"""
Ingestion layer for the ROLIE feed checker.

Provides the HTTP transport, the document models for provider metadata,
ROLIE feeds and service documents, and the feed loader that turns a feed
URL into the list of advisories it announces.
"""
from .documents import (
    AdvisoryFile,
    DocumentError,
    Feed,
    ProviderMetadata,
    RolieEntry,
    RolieFeed,
    ServiceDocument,
    validate_rolie_feed,
    validate_service_document,
)
from .http_client import HttpClient, RateLimiter
from .feed_loader import RolieFeedLoader

__all__ = [
    "AdvisoryFile",
    "DocumentError",
    "Feed",
    "ProviderMetadata",
    "RolieEntry",
    "RolieFeed",
    "ServiceDocument",
    "validate_rolie_feed",
    "validate_service_document",
    "HttpClient",
    "RateLimiter",
    "RolieFeedLoader",
]
