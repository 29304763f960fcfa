"""Variant identification for raw iBoot-family images.

The images carry no container, only a build banner at a fixed offset. The
first few bytes of that banner name the variant (``iBoot-1234.5.6``,
``SecureROM for t8101si, ...``), so classification is a substring check on a
small window.
"""

from dataclasses import dataclass
from typing import Optional

TAG_OFFSET = 0x200
TAG_LENGTH = 9

# Header plus the build strings read at fixed offsets below.
MIN_IMAGE_SIZE = 0x400

# Checked in order, first hit wins.
VARIANTS = ("SecureROM", "iBoot", "iBEC", "iBSS", "AVPBooter")
DEFAULT_VARIANT = "iBoot"
ROM_VARIANTS = frozenset(["SecureROM"])

BUILD_BANNER_OFFSET = 0x200
BUILD_STYLE_OFFSET = 0x240
BUILD_TAG_OFFSET = 0x280
BUILD_STRING_MAX = 0x40

RELEASE_STYLES = ("RELEASE", "ROMRELEASE", "RESEARCH_RELEASE")
BUILD_STYLES = RELEASE_STYLES + ("DEBUG", "DEVELOPMENT")


@dataclass(frozen=True)
class Variant:
    name: str
    is_rom: bool = False


@dataclass(frozen=True)
class BuildInfo:
    banner: str
    style: str
    tag: str

    @property
    def is_release(self):
        return self.style in RELEASE_STYLES


def read_tag(data):
    return bytes(data.read(TAG_OFFSET, TAG_LENGTH))


def is_valid_for_data(data):
    """Whether ``data`` looks like an image of this family at all."""
    if data is None or len(data) < MIN_IMAGE_SIZE:
        return False

    tag = read_tag(data)
    return any(v.encode() in tag for v in VARIANTS)


def identify_variant(data) -> Variant:
    tag = read_tag(data)
    for v in VARIANTS:
        if v.encode() in tag:
            return Variant(v, v in ROM_VARIANTS)

    return Variant(DEFAULT_VARIANT)


def _read_cstring(data, offset) -> str:
    raw = bytes(data.read(offset, BUILD_STRING_MAX))
    return raw.split(b"\x00", 1)[0].decode("latin-1")


def read_build_info(data) -> Optional[BuildInfo]:
    if len(data) < MIN_IMAGE_SIZE:
        return None

    return BuildInfo(
        banner=_read_cstring(data, BUILD_BANNER_OFFSET),
        style=_read_cstring(data, BUILD_STYLE_OFFSET),
        tag=_read_cstring(data, BUILD_TAG_OFFSET),
    )
