# ==============================================
# heapstats — Heap Snapshot String & Type Statistics
# ==============================================
#
# Package Structure (4 Topics + Orchestrator):
#
# heapstats/
# ├── provider/         # Topic 1: Heap provider interface + JSON snapshot reader
# ├── aggregation/      # Topic 2: Classify objects, fold them into buckets
# ├── ranking/          # Topic 3: Top-K selection over buckets
# ├── reporting/        # Topic 4: report.txt + StringInstanceN.txt
# ├── config.py         # Configuration management
# ├── errors.py         # Error taxonomy
# ├── analyze_heap.py   # Final orchestrator class (state machine)
# └── cli.py            # Command line entry point
#
# ==============================================

__version__ = "0.1.0"
