"""
Dense ordering of sibling collections.

Works on anything with an integer `order` attribute. Every operation first
materializes an order-sorted snapshot of the siblings, computes the new
arrangement on that snapshot and only then writes `order = index` back, so
after each call the orders of the returned list are exactly 0..N-1.
"""

from typing import Iterable, List, TypeVar

from domain.errors import NotFound

T = TypeVar("T")


def sort_by_order(siblings: Iterable[T]) -> List[T]:
    # sorted() is stable, so ties keep the order they were given in
    return sorted(siblings, key=lambda s: s.order)


def next_order(siblings: Iterable[T]) -> int:
    return len(list(siblings))


def _reindex(arranged: List[T]) -> List[T]:
    for index, sibling in enumerate(arranged):
        if sibling.order != index:
            sibling.order = index
    return arranged


def _same(a, b) -> bool:
    if a is b:
        return True
    a_id = getattr(a, "id", None)
    return a_id is not None and a_id == getattr(b, "id", None)


def _clamp(index: int, upper: int) -> int:
    return max(0, min(index, upper))


def compact(siblings: Iterable[T]) -> List[T]:
    return _reindex(sort_by_order(siblings))


def append(siblings: Iterable[T], new: T) -> List[T]:
    arranged = sort_by_order(siblings)
    new.order = len(arranged)
    arranged.append(new)
    return arranged


def insert(siblings: Iterable[T], new: T, index: int) -> List[T]:
    arranged = sort_by_order(siblings)
    arranged.insert(_clamp(index, len(arranged)), new)
    return _reindex(arranged)


def remove(siblings: Iterable[T], target: T) -> List[T]:
    """Drop `target` and re-compact the rest. Returns the remaining siblings."""
    arranged = sort_by_order(siblings)
    remaining = [s for s in arranged if not _same(s, target)]
    if len(remaining) == len(arranged):
        raise NotFound(type(target).__name__, getattr(target, "id", None))
    return _reindex(remaining)


def move(siblings: Iterable[T], from_index: int, to_index: int) -> List[T]:
    arranged = sort_by_order(siblings)
    if not arranged:
        return arranged
    last = len(arranged) - 1
    moving = arranged.pop(_clamp(from_index, last))
    arranged.insert(_clamp(to_index, last), moving)
    return _reindex(arranged)


def has_duplicate_orders(siblings: Iterable[T]) -> bool:
    orders = [s.order for s in siblings]
    return len(set(orders)) != len(orders)


def is_dense(siblings: Iterable[T]) -> bool:
    orders = sorted(s.order for s in siblings)
    return orders == list(range(len(orders)))
