# ==============================================
# HeapAnalysis — Final Orchestrator
# ==============================================
#
# PURPOSE:
#   This is the MAIN CLASS that ties all 4 topics together into
#   a single pass over a heap snapshot. Users interact with this
#   class (or analyze_dump()) only.
#
# HOW IT CONNECTS THE 4 TOPICS:
#
#   ┌──────────────────────────────────────────────────────────┐
#   │                      HeapAnalysis                        │
#   │                                                          │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ TOPIC 1: PROVIDER                            │        │
#   │  │  HeapProvider.enumerate_objects()            │        │
#   │  └──────────────┬───────────────────────────────┘        │
#   │                 │ one address at a time                  │
#   │                 ▼                                        │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ TOPIC 2: CLASSIFICATION & AGGREGATION        │        │
#   │  │  ObjectClassifier → String/TypeAggregator    │        │
#   │  │  → AggregationState                          │        │
#   │  └──────────────┬───────────────────────────────┘        │
#   │                 │ buckets                                │
#   │                 ▼                                        │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ TOPIC 3: RANKING                             │        │
#   │  │  TopKSelector → Report                       │        │
#   │  └──────────────┬───────────────────────────────┘        │
#   │                 │                                        │
#   │                 ▼                                        │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ TOPIC 4: REPORTING                           │        │
#   │  │  ReportWriter → report.txt, StringInstanceN  │        │
#   │  └──────────────────────────────────────────────┘        │
#   └──────────────────────────────────────────────────────────┘
#
# STATE MACHINE:
#
#   START → ENUMERATING → AGGREGATING → RANKING → REPORTING → DONE
#
#   Strictly forward. A HeapProviderError raised by the enumeration
#   or by a per-object provider call, or a cancel() request, ends
#   ENUMERATING early and the run carries on with the partial
#   state. An object in flight when the provider fails is counted
#   as a "provider_failure" skip. cancel() is only honoured
#   between objects, so no bucket is ever half-updated.
#
# CLASS: HeapAnalysis
# -------------------
#   - __init__(provider, config=None)
#   - run() -> RunSummary          (one-shot)
#   - cancel() -> None             (safe from a signal handler)
#   - phase (property)
#
# FUNCTION: analyze_dump(dump_path, resolver_path, symbol_path, config)
#   Validate arguments, open a JsonSnapshotProvider, run, close.
#
# ==============================================

import logging
import os
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional

from heapstats.aggregation.buckets import PROVIDER_FAILURE, AggregationState
from heapstats.aggregation.classifier import ObjectClassifier
from heapstats.aggregation.string_aggregator import StringAggregator
from heapstats.aggregation.type_aggregator import TypeAggregator
from heapstats.config import AppConfig, get_config
from heapstats.errors import ConfigurationError, HeapProviderError
from heapstats.provider.base import HeapProvider
from heapstats.provider.json_snapshot import JsonSnapshotProvider
from heapstats.reporting.report import EnumerationOutcome, Report, Totals
from heapstats.reporting.writer import ReportWriter

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 1_000_000


class Phase(IntEnum):
    START = 0
    ENUMERATING = 1
    AGGREGATING = 2
    RANKING = 3
    REPORTING = 4
    DONE = 5


@dataclass
class RunSummary:
    """What a finished run hands back to its caller."""
    phase: Phase
    outcome: EnumerationOutcome
    totals: Totals
    failure: Optional[str] = None
    report_path: Optional[str] = None
    string_files: List[str] = field(default_factory=list)
    write_errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.name,
            "outcome": self.outcome.value,
            "failure": self.failure,
            "totals": self.totals.to_dict(),
            "report_path": self.report_path,
            "string_files": list(self.string_files),
            "write_errors": list(self.write_errors),
        }


class HeapAnalysis:
    """
    One analysis run over one provider.

    The AggregationState lives only inside run(); nothing is shared
    between runs or instances.
    """

    def __init__(self, provider: HeapProvider, config: Optional[AppConfig] = None):
        """
        Initialize the pipeline components.

        Args:
            provider: Open heap provider (enumerated at most once)
            config: Application configuration. If None, loads from environment.
        """
        self._config = config or get_config()
        self._provider = provider

        # TOPIC 2: Classification & Aggregation
        self._classifier = ObjectClassifier(
            provider,
            StringAggregator(provider, self._config.aggregation),
            TypeAggregator(provider, self._config.aggregation),
        )

        # TOPIC 4: Reporting
        self._writer = ReportWriter(provider.type_display_name, self._config.report)

        self._phase = Phase.START
        self._cancel_requested = False

    @property
    def phase(self) -> Phase:
        return self._phase

    def cancel(self) -> None:
        """Stop enumeration after the object currently being classified."""
        self._cancel_requested = True

    def run(self) -> RunSummary:
        """
        Scan, rank and report.

        Returns:
            RunSummary with totals, outcome and written artifacts

        Raises:
            RuntimeError: If the run was already started
        """
        self._advance(Phase.ENUMERATING)
        state = AggregationState(sample_cap=self._config.aggregation.sample_cap)
        outcome, failure = self._scan(state)

        self._advance(Phase.AGGREGATING)
        totals = Totals.from_state(state)
        logger.info(
            f"Aggregated {totals.objects_seen} objects: {totals.instance_count} instances, "
            f"{totals.string_count} strings, {totals.skipped_count} skipped"
        )

        self._advance(Phase.RANKING)
        report = Report.build(state, totals, self._config.ranking, outcome, failure)

        self._advance(Phase.REPORTING)
        written = self._writer.write(report)

        self._advance(Phase.DONE)
        return RunSummary(
            phase=self._phase,
            outcome=outcome,
            totals=totals,
            failure=failure,
            report_path=written.report_path,
            string_files=written.string_files,
            write_errors=written.errors,
        )

    # ======================================
    # Internal helpers
    # ======================================
    def _scan(self, state: AggregationState):
        """Classify objects until the enumeration ends, fails or is cancelled."""
        try:
            objects = iter(self._provider.enumerate_objects())
        except HeapProviderError as e:
            logger.error(f"Enumeration failed to start: {e}")
            return EnumerationOutcome.FAILED, str(e)

        while not self._cancel_requested:
            try:
                address = next(objects)
            except StopIteration:
                return EnumerationOutcome.COMPLETE, None
            except HeapProviderError as e:
                logger.error(f"Enumeration failed after {state.objects_seen} objects: {e}")
                return EnumerationOutcome.FAILED, str(e)

            try:
                self._classifier.classify(address, state)
            except HeapProviderError as e:
                # The in-flight object was counted as seen but landed nowhere
                state.skip(PROVIDER_FAILURE)
                logger.error(f"Provider failed on object 0x{address:x}: {e}")
                return EnumerationOutcome.FAILED, str(e)

            if state.objects_seen % PROGRESS_EVERY == 0:
                logger.info(f"Classified {state.objects_seen} objects")

        logger.warning(f"Enumeration cancelled after {state.objects_seen} objects")
        return EnumerationOutcome.CANCELLED, None

    def _advance(self, phase: Phase) -> None:
        if phase <= self._phase:
            raise RuntimeError(f"Cannot move from {self._phase.name} to {phase.name}")
        logger.debug(f"{self._phase.name} -> {phase.name}")
        self._phase = phase


def validate_paths(
    dump_path: Optional[str],
    resolver_path: Optional[str] = None,
) -> None:
    """
    Check invocation arguments before any heap access.

    Raises:
        ConfigurationError: If the dump (or a given resolver) is missing
    """
    if not dump_path:
        raise ConfigurationError("A heap dump path is required")
    if not os.path.isfile(dump_path):
        raise ConfigurationError(f"Dump file {dump_path} doesn't exist")
    if resolver_path and not os.path.isfile(resolver_path):
        raise ConfigurationError(f"Runtime resolver {resolver_path} could not be found")


def analyze_dump(
    dump_path: str,
    resolver_path: Optional[str] = None,
    symbol_path: Optional[str] = None,
    config: Optional[AppConfig] = None,
    analysis_hook=None,
) -> RunSummary:
    """
    Analyze one JSON heap snapshot end to end.

    Args:
        dump_path: Heap snapshot file
        resolver_path: Optional runtime type table file
        symbol_path: Optional symbol path (logged, not used)
        config: Application configuration. If None, loads from environment.
        analysis_hook: Optional callable receiving the HeapAnalysis before
            it runs (the CLI uses it to wire SIGINT to cancel())

    Returns:
        RunSummary of the run

    Raises:
        ConfigurationError: Bad arguments, nothing was opened
        ProviderInitError: Snapshot could not be loaded, no report written
    """
    config = (config or get_config()).validate()
    validate_paths(dump_path, resolver_path)

    with JsonSnapshotProvider.open(dump_path, resolver_path, symbol_path) as provider:
        analysis = HeapAnalysis(provider, config)
        if analysis_hook is not None:
            analysis_hook(analysis)
        return analysis.run()
