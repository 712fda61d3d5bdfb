# ==============================================
# ObjectClassifier
# ==============================================
#
# PURPOSE:
#   Decide, for every enumerated object, whether it is string
#   data, a general instance, or unresolvable, and hand it to
#   the matching aggregator.
#
# CLASS: ObjectClassifier
# -----------------------
#   Constructor:
#   ------------
#   - __init__(provider, string_aggregator, type_aggregator)
#
#   Methods:
#   --------
#   - classify(address, state) -> str
#       Applies rules in order:
#
#       RULE 1: TYPE DOES NOT RESOLVE → SKIPPED
#         Corrupt metadata or an unloaded module, including a
#         type whose textual-ness cannot be read:
#           → state.skip("unresolved_type")
#
#       RULE 2: TEXTUAL TYPE → STRING
#         Checked before any read, string payloads are read
#         differently from instance sizes:
#           → StringAggregator.ingest()
#
#       RULE 3: EVERYTHING ELSE → INSTANCE
#           → TypeAggregator.ingest()
#
#       Returns the outcome: "string", "instance" or "skipped".
#
#       HeapProviderError is not caught here: it means the whole
#       provider is gone, and the orchestrator ends enumeration.
#
# ==============================================

import logging

from heapstats.errors import PerObjectError
from heapstats.provider.base import HeapProvider
from .buckets import UNRESOLVED_TYPE, AggregationState
from .string_aggregator import StringAggregator
from .type_aggregator import TypeAggregator

logger = logging.getLogger(__name__)

STRING = "string"
INSTANCE = "instance"
SKIPPED = "skipped"


class ObjectClassifier:
    """
    Routes each heap object to exactly one of: a string bucket, a type
    bucket, or the skipped counter.
    """

    def __init__(
        self,
        provider: HeapProvider,
        string_aggregator: StringAggregator,
        type_aggregator: TypeAggregator,
    ):
        self.provider = provider
        self.string_aggregator = string_aggregator
        self.type_aggregator = type_aggregator

    def classify(self, address: int, state: AggregationState) -> str:
        """
        Classify one object and fold it into the state.

        Args:
            address: Heap address of the object
            state: Aggregation state of the current run

        Returns:
            "string", "instance" or "skipped"
        """
        state.objects_seen += 1

        try:
            heap_type = self.provider.resolve_type(address)
        except PerObjectError as e:
            logger.debug(f"Type resolution failed: {e}")
            heap_type = None

        # RULE 1: unresolved
        if heap_type is None:
            state.skip(UNRESOLVED_TYPE)
            return SKIPPED

        try:
            is_text = self.provider.is_text_type(heap_type)
        except PerObjectError as e:
            logger.debug(f"Type metadata unreadable: {e}")
            state.skip(UNRESOLVED_TYPE)
            return SKIPPED

        # RULE 2: textual data
        if is_text:
            landed = self.string_aggregator.ingest(address, heap_type, state)
            return STRING if landed else SKIPPED

        # RULE 3: general instance
        landed = self.type_aggregator.ingest(address, heap_type, state)
        return INSTANCE if landed else SKIPPED
