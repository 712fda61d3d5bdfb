# ==============================================
# TopKSelector
# ==============================================
#
# PURPOSE:
#   Rank buckets by a weight function and keep the K heaviest.
#
# WEIGHTS:
# --------
# - string_weight(bucket) = count × length (characters)
#     A heuristic proxy for space wasted by duplication. Per-object
#     header and padding overhead is deliberately not modelled, so
#     this is NOT the exact in-memory footprint.
#
# - type_weight(bucket) = count
#
# ORDERING:
# ---------
#   Descending by weight. Ties break by first-encountered order
#   (the position in the iterable, i.e. dict insertion order of the
#   bucket maps), so repeated runs on the same input rank the same.
#
#   Uses a fixed-capacity min-heap of (weight, -position): memory is
#   O(K) regardless of how many buckets are scanned.
#
# ==============================================

import heapq
from typing import Callable, Iterable, List, TypeVar

from heapstats.aggregation.buckets import StringBucket, TypeBucket

B = TypeVar("B")


def string_weight(bucket: StringBucket) -> int:
    return bucket.count * bucket.length


def type_weight(bucket: TypeBucket) -> int:
    return bucket.count


class TopKSelector:
    """
    Deterministic top-K over an iterable of buckets.

    Args:
        k: Number of buckets to keep (0 keeps none)
        weight: Function mapping a bucket to its integer weight
    """

    def __init__(self, k: int, weight: Callable[[B], int]):
        if k < 0:
            raise ValueError(f"k must be >= 0, got {k}")
        self.k = k
        self.weight = weight

    def select(self, buckets: Iterable[B]) -> List[B]:
        """
        Return the K heaviest buckets, heaviest first.

        Args:
            buckets: Buckets in first-encountered order

        Returns:
            At most K buckets sorted by descending weight, ties in
            first-encountered order
        """
        if self.k == 0:
            return []

        heap = []
        for position, bucket in enumerate(buckets):
            entry = (self.weight(bucket), -position, bucket)
            if len(heap) < self.k:
                heapq.heappush(heap, entry)
            elif entry[:2] > heap[0][:2]:
                heapq.heapreplace(heap, entry)

        # (weight, -position) is unique per entry, buckets are never compared
        heap.sort(key=lambda entry: entry[:2], reverse=True)
        return [bucket for _, _, bucket in heap]


def top_strings(buckets: Iterable[StringBucket], k: int = 10) -> List[StringBucket]:
    return TopKSelector(k, string_weight).select(buckets)


def top_types(buckets: Iterable[TypeBucket], k: int = 5) -> List[TypeBucket]:
    return TopKSelector(k, type_weight).select(buckets)
