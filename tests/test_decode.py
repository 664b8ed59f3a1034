"""Tests for instruction decoding and disassembly."""

import pytest
from chipvm import decode, is_known, is_known_opcode, disassemble


class TestDecode:
    """Operand extraction."""

    def test_fields(self):
        decoded = decode(0xD12F)
        assert decoded.opcode == 0xD
        assert decoded.x == 0x1
        assert decoded.y == 0x2
        assert decoded.n == 0xF
        assert decoded.kk == 0x2F
        assert decoded.nnn == 0x12F
        assert decoded.raw == 0xD12F


KNOWN = [
    0x00E0, 0x00EE, 0x0123, 0x1234, 0x2345, 0x3412, 0x4412, 0x5120, 0x6A12, 0x7A12,
    0x8120, 0x8121, 0x8122, 0x8123, 0x8124, 0x8125, 0x8126, 0x8127, 0x812E,
    0x9120, 0xA123, 0xB123, 0xC1FF, 0xD125, 0xE19E, 0xE1A1,
    0xF107, 0xF10A, 0xF115, 0xF118, 0xF11E, 0xF129, 0xF133, 0xF155, 0xF165,
]

UNKNOWN = [0x5121, 0x912F, 0x8128, 0x812F, 0xE100, 0xE19F, 0xF100, 0xF1FF]


class TestKnownOpcodes:
    """Recognition of the 35 instructions."""

    @pytest.mark.parametrize("word", KNOWN)
    def test_known(self, word):
        assert is_known_opcode(word)
        assert bool(is_known(decode(word)))

    @pytest.mark.parametrize("word", UNKNOWN)
    def test_unknown(self, word):
        assert not is_known_opcode(word)
        assert not bool(is_known(decode(word)))


class TestDisassemble:
    """Mnemonic rendering."""

    @pytest.mark.parametrize("word, text", [
        (0x00E0, "CLS"),
        (0x00EE, "RET"),
        (0x0123, "SYS 0x123"),
        (0x1ABC, "JP 0xABC"),
        (0x2ABC, "CALL 0xABC"),
        (0x3A12, "SE VA, 0x12"),
        (0x4A12, "SNE VA, 0x12"),
        (0x5AB0, "SE VA, VB"),
        (0x6105, "LD V1, 0x05"),
        (0x7103, "ADD V1, 0x03"),
        (0x8AB4, "ADD VA, VB"),
        (0x8AB6, "SHR VA, VB"),
        (0x8ABE, "SHL VA, VB"),
        (0x9AB0, "SNE VA, VB"),
        (0xA300, "LD I, 0x300"),
        (0xB300, "JP V0, 0x300"),
        (0xC1FF, "RND V1, 0xFF"),
        (0xD015, "DRW V0, V1, 5"),
        (0xE29E, "SKP V2"),
        (0xE2A1, "SKNP V2"),
        (0xF20A, "LD V2, K"),
        (0xF233, "LD B, V2"),
        (0xF255, "LD [I], V2"),
        (0xF265, "LD V2, [I]"),
    ])
    def test_mnemonics(self, word, text):
        assert disassemble(word) == text

    @pytest.mark.parametrize("word", UNKNOWN)
    def test_unknown_words(self, word):
        assert disassemble(word) == f"???? 0x{word:04X}"
