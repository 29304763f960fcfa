from binaryninja import *
from binaryninja.log import Logger

from . import variant
from .coordinator import ImageLoadCoordinator
from .host import Permission, StringReference
from .log import LoaderLog
from .settings import (
    DEFAULT_PLATFORM,
    DEFINE_FIXED_SYMBOLS,
    FIXED_SYMBOL_DURABILITY,
    HEURISTIC_SYMBOL_DURABILITY,
    IMAGE_BASE,
    PLATFORM,
    SCHEMAS,
    USE_FUNCTION_HEURISTICS,
    LoadSettings,
    schema_json,
)
from .symbols import Durability, SymbolKind

SYMBOL_TYPES = {
    SymbolKind.FUNCTION: SymbolType.FunctionSymbol,
    SymbolKind.DATA: SymbolType.DataSymbol,
}

SEGMENT_FLAGS = {
    Permission.READ: SegmentFlag.SegmentReadable,
    Permission.WRITE: SegmentFlag.SegmentWritable,
    Permission.EXECUTE: SegmentFlag.SegmentExecutable,
}


class BinaryViewHost:
    """Host contract implemented on top of an ``AIFView``."""

    def __init__(self, view):
        self.view = view
        self.completion_events = []

    def read(self, address, length):
        return self.view.read(address, length)

    def strings(self):
        return [StringReference(s.start, s.length) for s in self.view.strings]

    def code_refs_to(self, address):
        return [ref.function.start for ref in self.view.get_code_refs(address) if ref.function is not None]

    def function_containing(self, address):
        functions = self.view.get_functions_containing(address)
        if not functions:
            return None
        return functions[0].start

    def find_data(self, pattern):
        return self.view.find_next_data(self.view.start, pattern)

    def define_symbol(self, address, kind, name, durability):
        symbol = Symbol(SYMBOL_TYPES[kind], address, name)
        if durability is Durability.USER:
            self.view.define_user_symbol(symbol)
        else:
            self.view.define_auto_symbol(symbol)

    def add_segment(self, start, length, data_offset, data_length, permissions):
        flags = 0
        for perm, flag in SEGMENT_FLAGS.items():
            if perm in permissions:
                flags |= flag
        self.view.add_auto_segment(start, length, data_offset, data_length, flags)

    def add_section(self, name, start, length, semantics):
        self.view.add_auto_section(name, start, length, SectionSemantics.ReadOnlyCodeSectionSemantics)

    def add_entry_point(self, address):
        self.view.add_entry_point(address)

    def set_platform(self, name):
        if name in [p.name for p in list(Platform)]:
            platform = Platform[name]
        elif name in [a.name for a in list(Architecture)]:
            platform = Architecture[name].standalone_platform
        else:
            return False

        self.view.arch = platform.arch
        self.view.platform = platform
        return True

    def on_analysis_complete(self, callback):
        # The event must stay referenced until it fires.
        self.completion_events.append(AnalysisCompletionEvent(self.view, lambda: callback()))


class AIFView(BinaryView):
    long_name = "iBoot"
    name = "iBoot"

    def __init__(self, data):
        self.raw = data
        self.coordinator = None
        BinaryView.__init__(self, file_metadata=data.file, parent_view=data)
        self.log = LoaderLog(Logger(self.file.session_id, "BinaryView.iBoot"))

    @classmethod
    def is_valid_for_data(cls, data):
        return variant.is_valid_for_data(data)

    @classmethod
    def get_load_settings_for_data(cls, data):
        settings = BinaryViewType[cls.name].get_default_load_settings_for_data(data)
        if settings is None:
            return None

        for key in SCHEMAS:
            settings.register_setting(key, schema_json(key))
        return settings

    def read_load_settings(self):
        settings = self.get_load_settings(self.name)
        if settings is None:
            return LoadSettings()

        getters = {
            DEFINE_FIXED_SYMBOLS: settings.get_bool,
            USE_FUNCTION_HEURISTICS: settings.get_bool,
            FIXED_SYMBOL_DURABILITY: settings.get_string,
            HEURISTIC_SYMBOL_DURABILITY: settings.get_string,
            IMAGE_BASE: settings.get_integer,
            PLATFORM: settings.get_string,
        }

        def get(key):
            if not settings.contains(key):
                return None
            return getters[key](key, self)

        return LoadSettings.from_getter(get)

    def init(self):
        try:
            self.coordinator = ImageLoadCoordinator(
                self.raw,
                BinaryViewHost(self),
                Architecture[DEFAULT_PLATFORM],
                self.log,
                self.read_load_settings(),
            ).load()
        except Exception as e:
            self.log.error(f"Failed to create view: {e}")
            return False
        return True

    def perform_is_executable(self):
        return True

    def perform_get_entry_point(self):
        if self.coordinator is None:
            return 0
        return self.coordinator.base

    def perform_get_address_size(self):
        return 8
