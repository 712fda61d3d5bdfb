# ==============================================
# HeapProvider
# ==============================================
#
# PURPOSE:
#   Abstract interface the aggregation engine consumes. A provider
#   owns the snapshot (file handles, paged readers, runtime type
#   metadata) and exposes it as a flat stream of object addresses.
#
# CONTRACT:
# ---------
#   - enumerate_objects() -> Iterator[int]
#       Lazy, finite, NOT restartable. Failures of the enumeration
#       itself surface as HeapProviderError from the iterator.
#
#   - resolve_type(address) -> Hashable | None
#       None when the type cannot be resolved (corrupt metadata,
#       unloaded module). The returned handle is the type identity:
#       equal handles mean the same type, regardless of name.
#
#   - is_text_type(heap_type) -> bool
#
#   - read_text_value(address, heap_type, max_length) -> str | None
#       At most max_length characters. None or HeapReadError when
#       memory is unreadable.
#
#   - compute_size(address, heap_type) -> int
#       Raises HeapReadError when the size cannot be computed.
#
#   - type_display_name(heap_type) -> str
#       Only called at report time, for reported entries.
#
# ==============================================

from abc import ABC, abstractmethod
from typing import Hashable, Iterator, Optional


class HeapProvider(ABC):
    """
    Read-only view over one heap snapshot.

    Providers are context managers; leaving the block releases the snapshot.
    """

    @abstractmethod
    def enumerate_objects(self) -> Iterator[int]:
        """Yield the address of every object on the heap, once."""

    @abstractmethod
    def resolve_type(self, address: int) -> Optional[Hashable]:
        """Return the type identity of the object at ``address`` or None."""

    @abstractmethod
    def is_text_type(self, heap_type: Hashable) -> bool:
        """True if instances of ``heap_type`` hold string data."""

    @abstractmethod
    def read_text_value(self, address: int, heap_type: Hashable, max_length: int) -> Optional[str]:
        """Read up to ``max_length`` characters of the string at ``address``."""

    @abstractmethod
    def compute_size(self, address: int, heap_type: Hashable) -> int:
        """Return the byte size of the instance at ``address``."""

    @abstractmethod
    def type_display_name(self, heap_type: Hashable) -> str:
        """Human-readable name for ``heap_type``."""

    def close(self) -> None:
        """Release the snapshot. Default is a no-op."""

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False
