"""
TLP label model.

Labels form a total order from least to most restricted:
UNLABELED < WHITE < GREEN < AMBER < RED. UNLABELED, WHITE and GREEN are
the publicly shareable tiers.
"""
from enum import Enum
from typing import Optional, Union


class TLPLabel(str, Enum):
    """Traffic Light Protocol label of a feed or advisory."""
    UNLABELED = "UNLABELED"
    WHITE = "WHITE"
    GREEN = "GREEN"
    AMBER = "AMBER"
    RED = "RED"

    def __str__(self) -> str:
        return self.value


ALL_LABELS = (
    TLPLabel.UNLABELED,
    TLPLabel.WHITE,
    TLPLabel.GREEN,
    TLPLabel.AMBER,
    TLPLabel.RED,
)

PUBLIC_LABELS = frozenset({TLPLabel.UNLABELED, TLPLabel.WHITE, TLPLabel.GREEN})

_RANKS = {label: rank for rank, label in enumerate(ALL_LABELS)}


def tlp_label(value: Union[TLPLabel, str, None]) -> TLPLabel:
    """
    Normalize a raw label value.

    Missing and unrecognized values are treated as UNLABELED, so a feed
    without a declared label compares like an unlabeled one.
    """
    if isinstance(value, TLPLabel):
        return value
    if not isinstance(value, str):
        return TLPLabel.UNLABELED
    try:
        return TLPLabel(value.strip().upper())
    except ValueError:
        return TLPLabel.UNLABELED


def tlp_rank(label: Union[TLPLabel, str, None]) -> int:
    """Return the inclusion rank of a label (0 for UNLABELED up to 4 for RED)."""
    return _RANKS[tlp_label(label)]


def is_public(label: Optional[TLPLabel]) -> bool:
    return tlp_label(label) in PUBLIC_LABELS
