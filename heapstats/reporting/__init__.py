# ==============================================
# TOPIC 4: REPORTING
# ==============================================
#
# Modules:
# --------
# - report.py   → Totals, Report, EnumerationOutcome (data classes)
# - writer.py   → ReportWriter (report.txt + StringInstanceN.txt)
#
# ==============================================

from .report import EnumerationOutcome, Report, Totals
from .writer import ReportWriter, WriteResult

__all__ = ["EnumerationOutcome", "Report", "Totals", "ReportWriter", "WriteResult"]
