import struct

import pytest

from aif_loader.decoder import InstructionToken
from aif_loader.log import LoaderLog

NOP = struct.pack("<I", 0xD503201F)
ADR_X0_SELF = struct.pack("<I", 0x10000000)

DEFAULT_BASE = 0x1800000000
LITERAL_OFFSET = 0x300


def ldr_literal(rt, pc, target):
    """Encode ``ldr x<rt>, target`` placed at ``pc``."""
    imm19 = ((target - pc) >> 2) & 0x7FFFF
    return struct.pack("<I", 0x58000000 | (imm19 << 5) | rt)


def make_image(
    size=0x1000,
    tag=b"iBoot-8419.0.151",
    style=b"RELEASE",
    build_tag=b"iBoot-8419.0.151",
    words=None,
    literals=None,
):
    """Synthetic image: NOP-filled code prefix, build strings, literal pool.

    ``words`` maps word index to 4 encoded bytes, ``literals`` maps offset to
    a 64-bit value. By default the image has the usual relocation preamble
    loading ``DEFAULT_BASE``.
    """
    data = bytearray(size)
    if words is None:
        words = {0: ADR_X0_SELF, 1: ldr_literal(1, 4, LITERAL_OFFSET)}
    if literals is None:
        literals = {LITERAL_OFFSET: DEFAULT_BASE}

    for i in range(0, min(size, 0x200), 4):
        data[i:i + 4] = words.get(i // 4, NOP)

    for offset, value in ((0x200, tag), (0x240, style), (0x280, build_tag)):
        if offset + len(value) <= size:
            data[offset:offset + len(value)] = value

    for offset, value in literals.items():
        data[offset:offset + 8] = struct.pack("<Q", value)

    return bytes(data)


class RecordingSink:
    def __init__(self):
        self.messages = []

    def log_debug(self, msg):
        self.messages.append(("debug", msg))

    def log_info(self, msg):
        self.messages.append(("info", msg))

    def log_warn(self, msg):
        self.messages.append(("warn", msg))

    def log_error(self, msg):
        self.messages.append(("error", msg))

    def at(self, level):
        return [m for lvl, m in self.messages if lvl == level]


class ScriptedArchitecture:
    """Decoder returning canned tokens per offset and recording every call.

    Offsets not in ``script`` decode as ``nop``; an entry of ``None`` makes
    decoding fail there.
    """

    def __init__(self, script=None):
        self.script = script or {}
        self.decoded = []

    def get_instruction_text(self, data, addr):
        self.decoded.append(addr)
        tokens = self.script.get(addr, [InstructionToken("nop", 0)])
        if tokens is None:
            return None
        return tokens, 4


def ldr_tokens(target):
    return [
        InstructionToken("ldr", 0),
        InstructionToken("    ", 0),
        InstructionToken("x1", 0),
        InstructionToken(", ", 0),
        InstructionToken(hex(target), target),
    ]


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def log(sink):
    return LoaderLog(sink)
