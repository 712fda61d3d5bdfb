# ==============================================
# JsonSnapshotProvider
# ==============================================
#
# PURPOSE:
#   HeapProvider over a heap snapshot exported as JSON. The object
#   map is keyed by hexadecimal address, the type table by type id:
#
#     {
#       "runtime": {"name": "clr", "version": "4.8"},
#       "types":   {"1": {"name": "System.String", "is_string": true},
#                   "2": {"name": "App.Order"}},
#       "objects": {"0x1000": {"type": 1, "size": 22, "data": "x"},
#                   "0x1020": {"type": 2, "size": 24}}
#     }
#
#   The type table may also come from a separate runtime resolver
#   file ({"types": {...}}), merged over the snapshot's own table.
#   That is how a snapshot exported without metadata gets its types.
#
#   Address keys that parse to the same number ("0x10", "0x010")
#   are one object: only the first is enumerated.
#
# CLASSES:
# --------
# - HeapType (frozen dataclass)
#     Opaque type identity. Equality is by type id only, so two
#     types that share a display name stay distinct.
#
# - JsonSnapshotProvider(HeapProvider)
#     open(dump_path, resolver_path=None, symbol_path=None) (classmethod)
#       Load and validate the snapshot. Raises ProviderInitError.
#
# ==============================================

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from heapstats.errors import HeapProviderError, HeapReadError, ProviderInitError
from .base import HeapProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeapType:
    """Type identity assigned by the snapshot's type table."""
    type_id: str

    def __str__(self) -> str:
        return f"type#{self.type_id}"


@dataclass
class _TypeRecord:
    name: str
    is_string: bool = False


def _load_json(path: Path, what: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ProviderInitError(f"Failed to load {what} {path}: {e}") from e

    if not isinstance(data, dict):
        raise ProviderInitError(f"{what} {path} is not a JSON object")
    return data


def _parse_types(raw: Any, source: Path) -> Dict[str, _TypeRecord]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ProviderInitError(f"'types' in {source} must be an object")

    types = {}
    for type_id, entry in raw.items():
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            raise ProviderInitError(f"Type {type_id!r} in {source} has no name")
        types[str(type_id)] = _TypeRecord(
            name=entry["name"],
            is_string=bool(entry.get("is_string", False)),
        )
    return types


class JsonSnapshotProvider(HeapProvider):
    """Serves objects out of a JSON heap snapshot, in file order."""

    def __init__(
        self,
        objects: Dict[str, Any],
        types: Dict[str, _TypeRecord],
        runtime: Optional[Dict[str, Any]] = None,
    ):
        self._objects = objects
        self._types = types
        self._records: Dict[int, Any] = {}
        self._enumerated = False
        self.runtime = runtime or {}

    @classmethod
    def open(
        cls,
        dump_path: str,
        resolver_path: Optional[str] = None,
        symbol_path: Optional[str] = None,
    ) -> "JsonSnapshotProvider":
        """
        Load a snapshot and its runtime type metadata.

        Args:
            dump_path: Path to the JSON heap snapshot
            resolver_path: Optional JSON file with a "types" table
            symbol_path: Accepted for interface parity, not used

        Returns:
            A ready provider

        Raises:
            ProviderInitError: If either file cannot be loaded or no
                type table is available
        """
        dump = Path(dump_path)
        data = _load_json(dump, "heap snapshot")

        objects = data.get("objects")
        if not isinstance(objects, dict):
            raise ProviderInitError(f"Heap snapshot {dump} has no 'objects' map")

        types = _parse_types(data.get("types"), dump)
        if resolver_path:
            resolver = Path(resolver_path)
            types.update(_parse_types(_load_json(resolver, "runtime resolver").get("types"), resolver))

        if not types:
            raise ProviderInitError(
                f"Heap snapshot {dump} carries no type table and no runtime resolver was given"
            )

        if symbol_path:
            logger.info(f"Symbol path {symbol_path} ignored, snapshot types are already named")

        runtime = data.get("runtime") if isinstance(data.get("runtime"), dict) else {}
        logger.info(
            f"Opened {dump}: {len(objects)} objects, {len(types)} types, "
            f"runtime {runtime.get('name', 'unknown')} {runtime.get('version', '')}".rstrip()
        )
        return cls(objects, types, runtime)

    # ======================================
    # HeapProvider interface
    # ======================================
    def enumerate_objects(self) -> Iterator[int]:
        if self._enumerated:
            raise HeapProviderError("Snapshot enumeration is not restartable")
        self._enumerated = True

        for key, record in self._objects.items():
            address = self._parse_address(key)
            # "0x10", "0x010" and "10" name the same object
            if address in self._records:
                logger.warning(f"Skipping duplicate object address {key!r} (0x{address:x})")
                continue
            self._records[address] = record
            yield address

    def resolve_type(self, address: int) -> Optional[HeapType]:
        record = self._records.get(address)
        if not isinstance(record, dict):
            return None

        type_id = record.get("type")
        if type_id is None or isinstance(type_id, bool):
            return None

        type_id = str(type_id)
        if type_id not in self._types:
            return None
        return HeapType(type_id)

    def is_text_type(self, heap_type: HeapType) -> bool:
        return self._types[heap_type.type_id].is_string

    def read_text_value(self, address: int, heap_type: HeapType, max_length: int) -> Optional[str]:
        value = self._record(address).get("data")
        if not isinstance(value, str):
            return None
        return value[:max_length]

    def compute_size(self, address: int, heap_type: HeapType) -> int:
        size = self._record(address).get("size")
        if not isinstance(size, int) or isinstance(size, bool) or size < 0:
            raise HeapReadError(address, f"invalid size {size!r}")
        return size

    def type_display_name(self, heap_type: HeapType) -> str:
        return self._types[heap_type.type_id].name

    def close(self) -> None:
        self._records.clear()

    # ======================================
    # Internal helpers
    # ======================================
    def _record(self, address: int) -> Dict[str, Any]:
        record = self._records.get(address)
        if not isinstance(record, dict):
            raise HeapReadError(address, "object record is missing")
        return record

    @staticmethod
    def _parse_address(key: str) -> int:
        try:
            address = int(key, 16)
        except (TypeError, ValueError):
            raise HeapProviderError(f"Corrupt object address {key!r}")
        if address < 0:
            raise HeapProviderError(f"Corrupt object address {key!r}")
        return address
