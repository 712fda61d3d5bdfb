# ==============================================
# Report (Data Classes)
# ==============================================
#
# PURPOSE:
#   The immutable OUTPUT of a run: a totals snapshot plus the two
#   rankings. Built once from the AggregationState, then handed to
#   the ReportWriter. Nothing here reads the provider.
#
# ENUMS:
# ------
# - EnumerationOutcome(Enum): COMPLETE, CANCELLED, FAILED
#     How the object scan ended.
#
# CLASSES:
# --------
# - Totals (frozen dataclass)
#     Snapshot of the running totals and skip breakdown.
#
# - Report (dataclass)
#     totals, top_strings, top_types, outcome, failure message,
#     and the K each ranking was asked for (used in headings).
#
# ==============================================

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from heapstats.aggregation.buckets import AggregationState, StringBucket, TypeBucket
from heapstats.config import RankingConfig
from heapstats.ranking.top_k import top_strings, top_types


class EnumerationOutcome(Enum):
    """
    How enumeration ended.

    - COMPLETE: every object was visited
    - CANCELLED: the user stopped the scan, report covers a prefix
    - FAILED: the provider broke mid-scan, report covers a prefix
    """
    COMPLETE = "complete"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class Totals:
    """Run totals at the moment aggregation finished."""
    objects_seen: int = 0
    instance_count: int = 0
    instance_bytes: int = 0
    string_count: int = 0
    string_bytes: int = 0
    skipped_count: int = 0
    skip_reasons: Dict[str, int] = field(default_factory=dict)
    distinct_strings: int = 0
    distinct_types: int = 0

    @classmethod
    def from_state(cls, state: AggregationState) -> "Totals":
        return cls(
            objects_seen=state.objects_seen,
            instance_count=state.instance_count,
            instance_bytes=state.instance_bytes,
            string_count=state.string_count,
            string_bytes=state.string_bytes,
            skipped_count=state.skipped_count,
            skip_reasons=dict(sorted(state.skip_reasons.items())),
            distinct_strings=len(state.strings),
            distinct_types=len(state.types),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "objects_seen": self.objects_seen,
            "instance_count": self.instance_count,
            "instance_bytes": self.instance_bytes,
            "string_count": self.string_count,
            "string_bytes": self.string_bytes,
            "skipped_count": self.skipped_count,
            "skip_reasons": dict(self.skip_reasons),
            "distinct_strings": self.distinct_strings,
            "distinct_types": self.distinct_types,
        }


@dataclass
class Report:
    """Everything report.txt is rendered from."""

    totals: Totals
    top_strings: List[StringBucket] = field(default_factory=list)
    top_types: List[TypeBucket] = field(default_factory=list)
    outcome: EnumerationOutcome = EnumerationOutcome.COMPLETE
    failure: Optional[str] = None
    string_k: int = 10
    type_k: int = 5

    @classmethod
    def build(
        cls,
        state: AggregationState,
        totals: Totals,
        ranking: RankingConfig = None,
        outcome: EnumerationOutcome = EnumerationOutcome.COMPLETE,
        failure: Optional[str] = None,
    ) -> "Report":
        """
        Rank the state's buckets and package them with the totals.

        Args:
            state: Finished aggregation state
            totals: Snapshot taken from that state
            ranking: K for each ranking (defaults 10 strings, 5 types)
            outcome: How enumeration ended
            failure: Provider error message when outcome is FAILED

        Returns:
            A Report ready for the writer
        """
        ranking = ranking or RankingConfig()
        return cls(
            totals=totals,
            top_strings=top_strings(state.strings.values(), ranking.top_strings),
            top_types=top_types(state.types.values(), ranking.top_types),
            outcome=outcome,
            failure=failure,
            string_k=ranking.top_strings,
            type_k=ranking.top_types,
        )
