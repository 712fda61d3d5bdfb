# ==============================================
# TypeAggregator
# ==============================================
#
# PURPOSE:
#   Fold every non-string object into a TypeBucket keyed by the
#   provider's type identity (never by display name).
#
# CLASS: TypeAggregator
# ---------------------
#   - ingest(address, heap_type, state) -> bool
#       1. Ask the provider for the instance size
#       2. On failure → state.skip("unreadable_size")
#       3. Look up / create the bucket for heap_type
#       4. Update count, cumulative bytes and samples
#
# ==============================================

import logging
from typing import Hashable

from heapstats.config import AggregationConfig
from heapstats.errors import PerObjectError
from heapstats.provider.base import HeapProvider
from .buckets import BUCKET_LIMIT, UNREADABLE_SIZE, AggregationState, TypeBucket

logger = logging.getLogger(__name__)


class TypeAggregator:
    """Tallies general instances by type identity."""

    def __init__(self, provider: HeapProvider, config: AggregationConfig = None):
        self.provider = provider
        self.config = config or AggregationConfig()

    def ingest(self, address: int, heap_type: Hashable, state: AggregationState) -> bool:
        try:
            size = self.provider.compute_size(address, heap_type)
        except PerObjectError as e:
            logger.debug(f"Unreadable instance size: {e}")
            state.skip(UNREADABLE_SIZE)
            return False

        bucket = state.types.get(heap_type)
        if bucket is None:
            limit = self.config.max_type_buckets
            if limit and len(state.types) >= limit:
                state.skip(BUCKET_LIMIT)
                return False
            bucket = TypeBucket(type_key=heap_type)
            state.types[heap_type] = bucket

        bucket.update(address, size, state.sample_cap)
        state.instance_count += 1
        state.instance_bytes += size
        return True
