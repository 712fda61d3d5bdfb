# ==============================================
# StringAggregator
# ==============================================
#
# PURPOSE:
#   Fold string objects into StringBuckets keyed by exact value.
#   Duplicate string values are the single most common source of
#   heap bloat, so this is where most of the report comes from.
#
# CLASS: StringAggregator
# -----------------------
#   Stateless across runs; the AggregationState is passed in.
#
#   Methods:
#   --------
#   - ingest(address, heap_type, state) -> bool
#       1. Read the value through the provider (bounded length)
#       2. On failure → state.skip("unreadable_string")
#       3. Look up / create the bucket for the exact value
#       4. Update count, cumulative bytes and samples
#       Returns True if the object landed in a bucket.
#
#   Byte size of a string is the UTF-16 length of the value read,
#   the storage width of managed-runtime strings ("x" → 2 bytes).
#
#   Values longer than max_string_length are keyed by their
#   truncated prefix. Two long strings sharing that prefix share a
#   bucket, and the StringInstance file holds the prefix only.
#
# ==============================================

import logging
from typing import Hashable

from heapstats.config import AggregationConfig
from heapstats.errors import PerObjectError
from heapstats.provider.base import HeapProvider
from .buckets import BUCKET_LIMIT, UNREADABLE_STRING, AggregationState, StringBucket

logger = logging.getLogger(__name__)

TEXT_ENCODING = "utf-16-le"


def text_byte_size(value: str) -> int:
    return len(value.encode(TEXT_ENCODING, "surrogatepass"))


class StringAggregator:
    """Tallies string objects by exact value."""

    def __init__(self, provider: HeapProvider, config: AggregationConfig = None):
        self.provider = provider
        self.config = config or AggregationConfig()

    def ingest(self, address: int, heap_type: Hashable, state: AggregationState) -> bool:
        """
        Add one string object to the state.

        Args:
            address: Heap address of the string object
            heap_type: Its resolved (textual) type
            state: Aggregation state of the current run

        Returns:
            True if counted in a bucket, False if skipped
        """
        try:
            value = self.provider.read_text_value(address, heap_type, self.config.max_string_length)
        except PerObjectError as e:
            logger.debug(f"Unreadable string: {e}")
            value = None

        if value is None:
            state.skip(UNREADABLE_STRING)
            return False

        # value is already cut to max_string_length, which is the bucket key
        bucket = state.strings.get(value)
        if bucket is None:
            limit = self.config.max_string_buckets
            if limit and len(state.strings) >= limit:
                state.skip(BUCKET_LIMIT)
                return False
            bucket = StringBucket(value=value)
            state.strings[value] = bucket

        size = text_byte_size(value)
        bucket.update(address, size, state.sample_cap)
        state.string_count += 1
        state.string_bytes += size
        return True
