# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# This file contains shared fixtures for all tests.
#
# FIXTURES:
# ---------
# - string_type / order_type / customer_type → fake type identities
# - make_type(type_id, name, is_string)      → more fake type identities
# - make_provider(objects, fail_after=None)  → in-memory HeapProvider
# - app_config                               → AppConfig writing to tmp_path
# - write_snapshot(data, name)               → JSON snapshot file on disk
#
# Objects for make_provider are plain dicts:
#   {"address": 0x1000, "type": order_type, "size": 24}
#   {"address": 0x2000, "type": string_type, "value": "x"}
# Optional keys:
#   "error": "type" | "read" | "size" → that provider call raises
#            "provider" → resolve_type raises HeapProviderError
#   "hook":  callable run when the object's value/size is read
# A FakeType with type_id "broken" makes is_text_type raise.
# ==============================================

import json
from dataclasses import dataclass

import pytest

from heapstats.config import AppConfig, ReportConfig
from heapstats.errors import HeapProviderError, HeapReadError
from heapstats.provider.base import HeapProvider


@dataclass(frozen=True)
class FakeType:
    type_id: str
    name: str
    is_string: bool = False


class FakeProvider(HeapProvider):
    """HeapProvider over a list of object dicts, enumerated in list order."""

    def __init__(self, objects, fail_after=None):
        self.objects = {obj["address"]: obj for obj in objects}
        self.order = [obj["address"] for obj in objects]
        self.fail_after = fail_after
        self.name_calls = []

    def enumerate_objects(self):
        for index, address in enumerate(self.order):
            if self.fail_after is not None and index >= self.fail_after:
                raise HeapProviderError(f"page fault at object {index}")
            yield address

    def resolve_type(self, address):
        obj = self.objects[address]
        if obj.get("error") == "type":
            raise HeapReadError(address, "bad method table")
        if obj.get("error") == "provider":
            raise HeapProviderError("paged reader died")
        return obj.get("type")

    def is_text_type(self, heap_type):
        if heap_type.type_id == "broken":
            raise HeapReadError(0, "unreadable type flags")
        return heap_type.is_string

    def read_text_value(self, address, heap_type, max_length):
        obj = self._touch(address)
        if obj.get("error") == "read":
            raise HeapReadError(address, "unreadable string")
        value = obj.get("value")
        return None if value is None else value[:max_length]

    def compute_size(self, address, heap_type):
        obj = self._touch(address)
        if obj.get("error") == "size":
            raise HeapReadError(address, "unreadable size")
        return obj.get("size", 0)

    def type_display_name(self, heap_type):
        self.name_calls.append(heap_type)
        return heap_type.name

    def _touch(self, address):
        obj = self.objects[address]
        if obj.get("hook"):
            obj["hook"]()
        return obj


@pytest.fixture
def string_type():
    return FakeType("1", "System.String", is_string=True)


@pytest.fixture
def order_type():
    return FakeType("2", "App.Order")


@pytest.fixture
def customer_type():
    return FakeType("3", "App.Customer")


@pytest.fixture
def make_type():
    """Factory for FakeType identities."""
    return FakeType


@pytest.fixture
def make_provider():
    """Factory for FakeProvider instances."""
    def _make(objects, fail_after=None):
        return FakeProvider(objects, fail_after=fail_after)
    return _make


@pytest.fixture
def app_config(tmp_path):
    """Default configuration writing into tmp_path/out."""
    return AppConfig(report=ReportConfig(output_dir=str(tmp_path / "out")))


@pytest.fixture
def write_snapshot(tmp_path):
    """Write a JSON document to tmp_path and return its path."""
    def _write(data, name="heap.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def sample_snapshot():
    """Snapshot with 3 App.Order, 2 "x" strings and 1 "hello" string."""
    return {
        "runtime": {"name": "clr", "version": "4.8"},
        "types": {
            "1": {"name": "System.String", "is_string": True},
            "2": {"name": "App.Order"},
        },
        "objects": {
            "0x1000": {"type": 2, "size": 24},
            "0x1018": {"type": 1, "size": 22, "data": "x"},
            "0x1030": {"type": 2, "size": 24},
            "0x1048": {"type": 1, "size": 22, "data": "x"},
            "0x1060": {"type": 2, "size": 24},
            "0x1078": {"type": 1, "size": 30, "data": "hello"},
        },
    }
