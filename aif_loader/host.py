"""What the loader needs from the analysis engine hosting it.

``BinaryViewHost`` in :mod:`aif_loader.view` implements this on top of a
Binary Ninja view; :class:`MemoryHost` implements it over a byte string for
headless use.
"""

import enum
from collections import namedtuple
from typing import Callable, Iterable, List, Optional, Protocol

from .symbols import Durability, SymbolKind, SymbolRecord

StringReference = namedtuple("StringReference", ["start", "length"])
Segment = namedtuple("Segment", ["start", "length", "data_offset", "data_length", "permissions"])
Section = namedtuple("Section", ["name", "start", "length", "semantics"])

READ_ONLY_CODE = "read-only-code"


class Permission(enum.Flag):
    READ = enum.auto()
    WRITE = enum.auto()
    EXECUTE = enum.auto()


class Host(Protocol):
    def read(self, address: int, length: int) -> bytes: ...

    def strings(self) -> Iterable[StringReference]: ...

    def code_refs_to(self, address: int) -> List[int]:
        """Start addresses of the functions referencing ``address``."""
        ...

    def function_containing(self, address: int) -> Optional[int]: ...

    def find_data(self, pattern: bytes) -> Optional[int]: ...

    def define_symbol(self, address: int, kind: SymbolKind, name: str, durability: Durability) -> None: ...

    def add_segment(self, start: int, length: int, data_offset: int, data_length: int, permissions: Permission) -> None: ...

    def add_section(self, name: str, start: int, length: int, semantics: str) -> None: ...

    def add_entry_point(self, address: int) -> None: ...

    def set_platform(self, name: str) -> bool: ...

    def on_analysis_complete(self, callback: Callable[[], None]) -> None: ...


class RawImage:
    """Read-only byte source with the same read semantics as a raw view."""

    def __init__(self, data):
        self.data = bytes(data)

    def __len__(self):
        return len(self.data)

    def read(self, offset, length):
        if offset < 0 or offset >= len(self.data):
            return b""
        return self.data[offset:offset + length]


class MemoryHost:
    """In-memory host.

    There is no code analysis here, so strings, references and function
    bounds are whatever the caller provides:

    * ``strings``: iterable of :class:`StringReference` (mapped addresses)
    * ``code_refs``: ``{address: [function start, ...]}``
    * ``functions``: ``{start: end}``, end exclusive
    """

    def __init__(self, data, strings=None, code_refs=None, functions=None, platforms=("aarch64",)):
        self.raw = RawImage(data)
        self.base = 0
        self._strings = list(strings or [])
        self._code_refs = dict(code_refs or {})
        self._functions = dict(functions or {})
        self.platforms = set(platforms)
        self.platform = None

        self.segments = []
        self.sections = []
        self.entry_points = []
        self.symbols = {}
        self._completion_callbacks = []

    def read(self, address, length):
        return self.raw.read(address - self.base, length)

    def strings(self):
        return list(self._strings)

    def code_refs_to(self, address):
        return list(self._code_refs.get(address, []))

    def function_containing(self, address):
        for start, end in sorted(self._functions.items()):
            if start <= address < end:
                return start
        return None

    def find_data(self, pattern):
        offset = self.raw.data.find(pattern)
        if offset < 0:
            return None
        return self.base + offset

    def define_symbol(self, address, kind, name, durability):
        self.symbols[address] = SymbolRecord(address, kind, name, durability)

    def symbol_at(self, address) -> Optional[SymbolRecord]:
        return self.symbols.get(address)

    def add_segment(self, start, length, data_offset, data_length, permissions):
        self.base = start - data_offset
        self.segments.append(Segment(start, length, data_offset, data_length, permissions))

    def add_section(self, name, start, length, semantics):
        self.sections.append(Section(name, start, length, semantics))

    def add_entry_point(self, address):
        self.entry_points.append(address)

    def set_platform(self, name):
        if name not in self.platforms:
            return False
        self.platform = name
        return True

    def on_analysis_complete(self, callback):
        self._completion_callbacks.append(callback)

    def complete_analysis(self):
        """Fire pending completion callbacks, each at most once."""
        callbacks, self._completion_callbacks = self._completion_callbacks, []
        for callback in callbacks:
            callback()
