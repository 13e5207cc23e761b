"""
Set reconciliation helpers shared by the completeness audit and the
service document check.
"""
from typing import Hashable, Iterable, List, Tuple, TypeVar

T = TypeVar("T", bound=Hashable)


def contains_all_keys(reference: Iterable[T], candidate: Iterable[T]) -> bool:
    """
    Check that every key of ``reference`` is present in ``candidate``.

    Both arguments may be mappings (keys are compared) or any other
    iterable of hashable identifiers.

    Returns:
        True if ``candidate`` covers ``reference``; an empty reference is
        always covered.
    """
    available = candidate if isinstance(candidate, (set, frozenset, dict)) else set(candidate)
    return all(key in available for key in reference)


def _unique(items: Iterable[T]) -> List[T]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def symmetric_difference(seq_a: Iterable[T], seq_b: Iterable[T]) -> Tuple[List[T], List[T]]:
    """
    Compare two collections of identifiers.

    Membership is order independent and duplicates collapse; each side
    keeps the order in which its elements were first seen.

    Returns:
        Tuple of (elements only in seq_a, elements only in seq_b)
    """
    unique_a = _unique(seq_a)
    unique_b = _unique(seq_b)
    set_a, set_b = set(unique_a), set(unique_b)
    only_a = [item for item in unique_a if item not in set_b]
    only_b = [item for item in unique_b if item not in set_a]
    return only_a, only_b
