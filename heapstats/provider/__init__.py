# ==============================================
# TOPIC 1: HEAP PROVIDER
# ==============================================
#
# This package is the boundary to the heap snapshot. Everything
# past it only sees addresses, opaque type handles and the
# values/sizes the provider reads on request.
#
# Modules:
# --------
# - base.py            → HeapProvider abstract interface
# - json_snapshot.py   → Provider over an exported JSON heap snapshot
#
# ==============================================

from .base import HeapProvider
from .json_snapshot import HeapType, JsonSnapshotProvider

__all__ = ["HeapProvider", "HeapType", "JsonSnapshotProvider"]
