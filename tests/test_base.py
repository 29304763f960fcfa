import struct

from aif_loader.base import UNKNOWN_BASE, predict_base_address
from aif_loader.decoder import CapstoneArchitecture
from aif_loader.host import RawImage

from conftest import (
    ADR_X0_SELF,
    DEFAULT_BASE,
    LITERAL_OFFSET,
    NOP,
    ScriptedArchitecture,
    ldr_literal,
    ldr_tokens,
    make_image,
)


def test_capstone_decodes_nop():
    tokens, length = CapstoneArchitecture().get_instruction_text(NOP, 0)
    assert tokens[0].text == "nop"
    assert length == 4


def test_capstone_resolves_literal_target():
    tokens, _ = CapstoneArchitecture().get_instruction_text(ldr_literal(1, 8, 0x300), 8)
    assert tokens[0].text == "ldr"
    assert tokens[-1].value == 0x300


def test_predicts_base_from_relocation_loop(log):
    data = RawImage(make_image())
    assert predict_base_address(data, CapstoneArchitecture(), log) == DEFAULT_BASE


def test_first_ldr_wins(log):
    words = {
        0: ADR_X0_SELF,
        5: ldr_literal(1, 20, 0x300),
        6: ldr_literal(2, 24, 0x308),
    }
    data = RawImage(make_image(words=words, literals={0x300: 0x19C030000, 0x308: 0x41414141}))
    assert predict_base_address(data, CapstoneArchitecture(), log) == 0x19C030000


def test_no_ldr_returns_unknown(log):
    data = RawImage(make_image(words={}))
    assert predict_base_address(data, CapstoneArchitecture(), log) == UNKNOWN_BASE


def test_scan_covers_exactly_the_first_0x200_bytes(log):
    arch = ScriptedArchitecture()
    assert predict_base_address(RawImage(make_image()), arch, log) == UNKNOWN_BASE
    assert arch.decoded == list(range(0, 0x200, 4))


def test_stops_at_first_ldr(log):
    arch = ScriptedArchitecture({12: ldr_tokens(LITERAL_OFFSET), 16: ldr_tokens(0x308)})
    data = RawImage(make_image(literals={LITERAL_OFFSET: DEFAULT_BASE, 0x308: 0x41414141}))
    assert predict_base_address(data, arch, log) == DEFAULT_BASE
    assert arch.decoded == [0, 4, 8, 12]


def test_decode_failure_aborts_scan(log, sink):
    arch = ScriptedArchitecture({8: None, 12: ldr_tokens(LITERAL_OFFSET)})
    assert predict_base_address(RawImage(make_image()), arch, log) == UNKNOWN_BASE
    assert arch.decoded == [0, 4, 8]
    assert sink.at("error") == ["[iBoot-Loader] Failed to get instruction text at offset 0x8."]


def test_empty_token_list_is_a_decode_failure(log, sink):
    arch = ScriptedArchitecture({0: []})
    assert predict_base_address(RawImage(make_image()), arch, log) == UNKNOWN_BASE
    assert arch.decoded == [0]
    assert len(sink.at("error")) == 1


def test_literal_out_of_bounds(log, sink):
    arch = ScriptedArchitecture({4: ldr_tokens(0x10000)})
    assert predict_base_address(RawImage(make_image()), arch, log) == UNKNOWN_BASE
    assert arch.decoded == [0, 4]
    assert "0x10000" in sink.at("error")[0]


def test_truncated_literal(log):
    data = make_image(size=0x400)
    arch = ScriptedArchitecture({0: ldr_tokens(0x3FC)})
    assert predict_base_address(RawImage(data), arch, log) == UNKNOWN_BASE


def test_literal_is_little_endian(log):
    data = bytearray(make_image())
    data[LITERAL_OFFSET:LITERAL_OFFSET + 8] = struct.pack("<Q", 0x0000000100000000)
    assert predict_base_address(RawImage(data), CapstoneArchitecture(), log) == 0x100000000
