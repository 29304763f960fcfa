"""Loading an image: the synchronous path and the deferred naming step."""

import enum
import weakref
from dataclasses import dataclass
from typing import Union

from . import base, fixed, heuristics, variant
from .host import Permission, READ_ONLY_CODE
from .settings import DEFAULT_PLATFORM, LoadSettings


class LoaderError(Exception):
    pass


class State(enum.Enum):
    NEW = "new"
    LOADING = "loading"
    ANNOTATED = "annotated"
    CLOSED = "closed"


class ImageLoadCoordinator:
    def __init__(self, raw, host, arch, log, settings=None):
        self.raw = raw
        self.host = host
        self.arch = arch
        self.log = log
        self.settings = settings if settings is not None else LoadSettings()

        self.state = State.NEW
        self.variant = variant.identify_variant(raw)
        self.build_info = variant.read_build_info(raw)
        self.platform = DEFAULT_PLATFORM
        self.base = base.UNKNOWN_BASE

    @property
    def name(self):
        return self.variant.name

    def _apply_platform(self):
        if not self.host.set_platform(DEFAULT_PLATFORM):
            self.log.error(f"Platform `{DEFAULT_PLATFORM}` is not available!")

        override = self.settings.platform
        if override is None or override == DEFAULT_PLATFORM:
            return

        if self.host.set_platform(override):
            self.platform = override
        else:
            self.log.error(f"Unknown platform override `{override}`; keeping `{self.platform}`.")

    def load(self):
        if self.state is not State.NEW:
            raise LoaderError(f"cannot load from state {self.state.value}")
        self.state = State.LOADING

        self.log.info(f"Loading {self.name}")
        if self.build_info is not None:
            self.log.info(f"Build: {self.build_info.banner} ({self.build_info.style or 'unknown style'})")

        self._apply_platform()

        self.base = base.predict_base_address(self.raw, self.arch, self.log)
        if not self.base:
            self.log.error("Failed to predict base address via relocation loop; analysis will be poor!")
        else:
            self.log.info(f"Predicted base address is {hex(self.base)}.")

        if self.settings.base_address is not None:
            self.log.info(f"Using base address override {hex(self.settings.base_address)}.")
            self.base = self.settings.base_address

        length = len(self.raw)
        self.host.add_segment(self.base, length, 0, length, Permission.READ | Permission.EXECUTE)
        self.host.add_section(self.name, self.base, length, READ_ONLY_CODE)

        if self.settings.define_fixed_symbols:
            if not self.base:
                self.log.warn("Base address is unknown, fixed-offset symbols will be relative to 0.")
            fixed.define_fixed_offset_symbols(self.host, self.base, self.log, self.settings.fixed_symbol_durability)

        if self.settings.use_function_heuristics:
            self.host.on_analysis_complete(_AnalysisCompletionTask(self))

        self.host.add_entry_point(self.base)
        return self

    def on_analysis_complete(self):
        if self.state is not State.LOADING:
            return

        self.log.info("Searching for strings to help define symbols...")
        durability = self.settings.heuristic_symbol_durability
        named = heuristics.define_string_associated_symbols(self.host, self.log, durability)
        named += heuristics.define_pattern_associated_symbols(self.host, self.log, durability)
        self.log.info(f"Named {named} function(s) heuristically.")
        self.state = State.ANNOTATED

    def close(self):
        self.state = State.CLOSED


class _AnalysisCompletionTask:
    """One-shot completion callback that does not keep the image alive."""

    def __init__(self, coordinator):
        self._ref = weakref.ref(coordinator)
        self.fired = False

    def __call__(self):
        if self.fired:
            return
        self.fired = True

        coordinator = self._ref()
        if coordinator is None:
            return
        coordinator.on_analysis_complete()


@dataclass(frozen=True)
class Loaded:
    coordinator: ImageLoadCoordinator


@dataclass(frozen=True)
class Rejected:
    reason: str


LoadResult = Union[Loaded, Rejected]


def open_image(raw, host, arch, log, settings=None) -> LoadResult:
    """Load ``raw`` into ``host`` if it belongs to the iBoot family."""
    if len(raw) < variant.MIN_IMAGE_SIZE:
        return Rejected(f"image is {hex(len(raw))} bytes, need at least {hex(variant.MIN_IMAGE_SIZE)}")
    if not variant.is_valid_for_data(raw):
        return Rejected(f"unrecognized header tag {variant.read_tag(raw)!r}")

    return Loaded(ImageLoadCoordinator(raw, host, arch, log, settings).load())
