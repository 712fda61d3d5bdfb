# ==============================================
# Buckets & AggregationState
# ==============================================
#
# PURPOSE:
#   Data classes that hold everything one run learns about the heap.
#   A bucket is the "evidence" for one string value or one type;
#   AggregationState is the single value threaded through every
#   pipeline stage.
#
# CLASSES:
# --------
# - StringBucket (dataclass)
#     value: str                 → Exact string value (bucket key)
#     count: int                 → Objects holding this value
#     total_size: int            → Cumulative bytes read
#     samples: list[int]         → First-seen addresses, capped
#     length (property)          → len(value) in characters
#
# - TypeBucket (dataclass)
#     type_key: Hashable         → Provider type identity (bucket key)
#     count / total_size / samples as above
#
# - AggregationState (dataclass)
#     strings: dict[str, StringBucket]
#     types: dict[Hashable, TypeBucket]
#     instance_count / instance_bytes / string_count / string_bytes
#     skipped_count: int
#     skip_reasons: dict[str, int] → breakdown of skipped_count
#       (unresolved_type, unreadable_string, unreadable_size,
#        bucket_limit, provider_failure)
#     objects_seen: int            → objects pulled from enumeration
#     sample_cap: int
#
#   Invariant: objects_seen == classified_count + skipped_count
#   once every pulled object has been classified.
#
# ==============================================

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List

# Skip reasons
UNRESOLVED_TYPE = "unresolved_type"
UNREADABLE_STRING = "unreadable_string"
UNREADABLE_SIZE = "unreadable_size"
BUCKET_LIMIT = "bucket_limit"
PROVIDER_FAILURE = "provider_failure"


@dataclass
class _Bucket:
    count: int = 0
    total_size: int = 0
    samples: List[int] = field(default_factory=list)

    def update(self, address: int, size: int, sample_cap: int) -> None:
        """
        Record one more object in this bucket.

        Args:
            address: Heap address of the object
            size: Bytes attributed to the object
            sample_cap: Maximum number of sample addresses kept
        """
        self.count += 1
        self.total_size += size

        # Track sample addresses (small, bounded, first-seen order)
        if len(self.samples) < sample_cap:
            self.samples.append(address)


@dataclass
class StringBucket(_Bucket):
    """Every object whose string content equals ``value``."""
    value: str = ""

    @property
    def length(self) -> int:
        return len(self.value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "count": self.count,
            "total_size": self.total_size,
            "samples": list(self.samples),
        }


@dataclass
class TypeBucket(_Bucket):
    """Every non-string object of one type identity."""
    type_key: Hashable = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": str(self.type_key),
            "count": self.count,
            "total_size": self.total_size,
            "samples": list(self.samples),
        }


@dataclass
class AggregationState:
    """
    All mutable state of one analysis run.

    Created fresh per run and discarded after the report is written.
    """

    sample_cap: int = 3

    # --- Buckets (insertion order == first-seen order) ---
    strings: Dict[str, StringBucket] = field(default_factory=dict)
    types: Dict[Hashable, TypeBucket] = field(default_factory=dict)

    # --- Running totals ---
    instance_count: int = 0
    instance_bytes: int = 0
    string_count: int = 0
    string_bytes: int = 0

    # --- Diagnostics ---
    objects_seen: int = 0
    skipped_count: int = 0
    skip_reasons: Dict[str, int] = field(default_factory=dict)

    def skip(self, reason: str) -> None:
        """Count one object that contributes to no bucket."""
        self.skipped_count += 1
        self.skip_reasons[reason] = self.skip_reasons.get(reason, 0) + 1

    @property
    def classified_count(self) -> int:
        return self.instance_count + self.string_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "objects_seen": self.objects_seen,
            "instance_count": self.instance_count,
            "instance_bytes": self.instance_bytes,
            "string_count": self.string_count,
            "string_bytes": self.string_bytes,
            "skipped_count": self.skipped_count,
            "skip_reasons": dict(self.skip_reasons),
            "distinct_strings": len(self.strings),
            "distinct_types": len(self.types),
        }
