# ==============================================
# ReportWriter
# ==============================================
#
# PURPOSE:
#   Serialize a Report to disk:
#     - <output_dir>/report.txt            totals + both rankings
#     - <output_dir>/StringInstance{N}.txt full value of the N-th
#                                          ranked string (1-based)
#
# RULES:
# ------
#   - Every write is create-or-overwrite.
#   - StringInstance files ranked above the current top list are
#     left over from an earlier run and get deleted.
#   - No timestamps: the same Report always renders the same bytes.
#   - Type display names are resolved here, only for ranked types.
#   - A failed file is logged + recorded in WriteResult.errors and
#     the remaining files are still written.
#
# CLASSES:
# --------
# - WriteResult (dataclass)
#     report_path: str | None     → report.txt if it was written
#     string_files: list[str]     → auxiliary files written
#     errors: list[str]           → one entry per failed artifact
#
# - ReportWriter
#     write(report) -> WriteResult
#     render(report, string_files) -> str
#
# ==============================================

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Hashable, List, Optional

from heapstats.config import ReportConfig
from heapstats.errors import HeapStatsError, ReportWriteError
from heapstats.ranking.top_k import string_weight
from .report import EnumerationOutcome, Report

logger = logging.getLogger(__name__)

RULE_WIDTH = 80


@dataclass
class WriteResult:
    report_path: Optional[str] = None
    string_files: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def _heading(title: str) -> str:
    return f"{title} ".ljust(RULE_WIDTH, "=")


def _hex_samples(addresses: List[int]) -> str:
    return ",".join(f"0x{address:x}" for address in addresses)


def string_file_name(rank: int) -> str:
    return f"StringInstance{rank}.txt"


STRING_FILE_PATTERN = re.compile(r"StringInstance(\d+)\.txt")


class ReportWriter:
    """
    Writes report.txt and the per-string auxiliary files.

    Args:
        name_resolver: Maps a type identity to its display name
            (normally ``provider.type_display_name``)
        config: Output directory, preview length and report file name
    """

    def __init__(
        self,
        name_resolver: Callable[[Hashable], str],
        config: ReportConfig = None,
    ):
        self.name_resolver = name_resolver
        self.config = config or ReportConfig()

    @property
    def output_dir(self) -> Path:
        return Path(self.config.output_dir)

    def write(self, report: Report) -> WriteResult:
        """
        Write every artifact of the report.

        Args:
            report: Report to serialize

        Returns:
            WriteResult listing what was written and what failed
        """
        result = WriteResult()

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            error = ReportWriteError(str(self.output_dir), e)
            logger.error(str(error))
            result.errors.append(str(error))
            return result

        self._remove_stale_string_files(len(report.top_strings), result)

        # Auxiliary files first, so report.txt can say which exist
        string_files: Dict[int, str] = {}
        for rank, bucket in enumerate(report.top_strings, start=1):
            path = self.output_dir / string_file_name(rank)
            try:
                self._write_text(path, bucket.value)
            except ReportWriteError as e:
                logger.warning(f"Skipping string file: {e}")
                result.errors.append(str(e))
                continue
            string_files[rank] = path.name
            result.string_files.append(str(path))

        report_path = self.output_dir / self.config.report_name
        try:
            self._write_text(report_path, self.render(report, string_files))
            result.report_path = str(report_path)
        except ReportWriteError as e:
            logger.error(str(e))
            result.errors.append(str(e))

        return result

    def render(self, report: Report, string_files: Dict[int, str] = None) -> str:
        """
        Render report.txt content.

        Args:
            report: Report to render
            string_files: rank → auxiliary file name, for ranks whose
                file was written

        Returns:
            The full report text, newline terminated
        """
        string_files = string_files or {}
        totals = report.totals
        lines = [_heading("HEAP SNAPSHOT SUMMARY")]

        lines.append(f"Objects enumerated: {totals.objects_seen}")
        lines.append(f"Instances: {totals.instance_count} objects, {totals.instance_bytes} bytes")
        lines.append(f"Strings: {totals.string_count} objects, {totals.string_bytes} bytes")
        lines.append(f"Distinct: {totals.distinct_types} types, {totals.distinct_strings} strings")
        lines.append(f"Skipped: {totals.skipped_count}")
        for reason, count in totals.skip_reasons.items():
            lines.append(f"  {reason}: {count}")

        if report.outcome is EnumerationOutcome.FAILED:
            lines.append(f"Enumeration: failed ({report.failure}), partial results")
        elif report.outcome is EnumerationOutcome.CANCELLED:
            lines.append("Enumeration: cancelled, partial results")
        else:
            lines.append("Enumeration: complete")
        lines.append("")

        # --- Strings ---
        lines.append(_heading(f"TOP {report.string_k} STRINGS that take most space"))
        if not report.top_strings:
            lines.append("(none)")
            lines.append("")
        for rank, bucket in enumerate(report.top_strings, start=1):
            lines.append(
                f"#{rank} Count: {bucket.count}  Weight: {string_weight(bucket)}  "
                f"Bytes: {bucket.total_size}"
            )
            lines.append(f"Samples: {_hex_samples(bucket.samples)}")
            lines.append(f"Full value: {string_files.get(rank, 'not written')}")
            lines.append("")
            lines.append(bucket.value[:self.config.preview_chars])
            lines.append("")

        # --- Types ---
        lines.append(_heading(f"TOP {report.type_k} TYPES by instance count"))
        if not report.top_types:
            lines.append("(none)")
        for rank, bucket in enumerate(report.top_types, start=1):
            lines.append(
                f"#{rank} {self._display_name(bucket.type_key)} "
                f"({bucket.count} instances, {bucket.total_size} bytes): "
                f"{_hex_samples(bucket.samples)}"
            )

        return "\n".join(lines) + "\n"

    # ======================================
    # Internal helpers
    # ======================================
    def _display_name(self, type_key: Hashable) -> str:
        try:
            return self.name_resolver(type_key)
        except (HeapStatsError, LookupError) as e:
            logger.warning(f"Could not resolve name of {type_key}: {e}")
            return f"<unresolved type {type_key}>"

    def _remove_stale_string_files(self, keep: int, result: WriteResult) -> None:
        """Delete StringInstance files ranked above the current top list."""
        for path in sorted(self.output_dir.glob("StringInstance*.txt")):
            match = STRING_FILE_PATTERN.fullmatch(path.name)
            if not match or int(match.group(1)) <= keep or not path.is_file():
                continue
            try:
                path.unlink()
            except OSError as e:
                error = ReportWriteError(str(path), e)
                logger.warning(f"Could not remove stale string file: {error}")
                result.errors.append(str(error))

    @staticmethod
    def _write_text(path: Path, text: str) -> None:
        try:
            with open(path, "w", encoding="utf-8", errors="backslashreplace", newline="\n") as f:
                f.write(text)
        except OSError as e:
            raise ReportWriteError(str(path), e) from e
