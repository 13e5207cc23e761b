"""
Compliance layer.

Implements the ROLIE feed checks: TLP label grading, completeness of the
per-label feeds, and reconciliation of the ROLIE service document with
the provider metadata.
"""
from .errors import ContinueScan, InvalidURL, ScanError
from .labels import ALL_LABELS, PUBLIC_LABELS, TLPLabel, tlp_label, tlp_rank
from .set_utils import contains_all_keys, symmetric_difference
from .urls import base_url, resolve_url
from .label_checker import LabelAccumulator, LabelInventory
from .integrity import IntegrityWalker
from .feed_engine import FeedComplianceEngine, FeedScanResult
from .service_check import ServiceCheckResult, ServiceDocumentReconciler


__all__ = [
    'ContinueScan',
    'InvalidURL',
    'ScanError',
    'ALL_LABELS',
    'PUBLIC_LABELS',
    'TLPLabel',
    'tlp_label',
    'tlp_rank',
    'contains_all_keys',
    'symmetric_difference',
    'base_url',
    'resolve_url',
    'LabelAccumulator',
    'LabelInventory',
    'IntegrityWalker',
    'FeedComplianceEngine',
    'FeedScanResult',
    'ServiceCheckResult',
    'ServiceDocumentReconciler',
]
