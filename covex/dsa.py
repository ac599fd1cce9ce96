"""
Sorting utilities
=================

Small ordering primitives used by the report views.

Included:
- Merge Sort (stable, O(n log n)), also stable when sorting descending
- Top-n selection with a heap (`heapq.nlargest`, ties keep input order)
- `nulls_last`, a key wrapper that orders missing values after all others
"""

from __future__ import annotations
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar
import heapq

T = TypeVar("T")


def merge_sort(arr: Sequence[T], key: Callable[[T], object] = lambda x: x, reverse: bool = False) -> List[T]:
    """Stable merge sort. Equal keys keep their input order in both directions."""
    if len(arr) <= 1:
        return list(arr)
    mid = len(arr) // 2
    left = merge_sort(arr[:mid], key=key, reverse=reverse)
    right = merge_sort(arr[mid:], key=key, reverse=reverse)
    return _merge(left, right, key=key, reverse=reverse)


def _merge(left: List[T], right: List[T], key: Callable[[T], object], reverse: bool) -> List[T]:
    out: List[T] = []
    # i and j are pointers into each sorted list
    i = j = 0
    while i < len(left) and j < len(right):
        a, b = key(left[i]), key(right[j])
        # on ties take from the left half
        take_left = (a >= b) if reverse else (a <= b)
        if take_left:
            out.append(left[i]); i += 1
        else:
            out.append(right[j]); j += 1
    out.extend(left[i:])
    out.extend(right[j:])
    return out


def top_n(arr: Sequence[T], n: int, key: Callable[[T], object]) -> List[T]:
    """Return the n largest items by key, descending; ties keep input order."""
    if n <= 0:
        return []
    return heapq.nlargest(n, arr, key=key)


def nulls_last(getter: Callable[[T], Optional[float]]) -> Callable[[T], Tuple[bool, float]]:
    """Wrap a getter so descending sorts put None after every number."""
    def key(item: T) -> Tuple[bool, float]:
        v = getter(item)
        return (v is not None, v if v is not None else 0.0)
    return key
