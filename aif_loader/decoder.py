"""Headless decoding service backed by capstone.

Mirrors the shape of ``Architecture.get_instruction_text`` in Binary Ninja so
the base predictor can run against either: a list of tokens, mnemonic first,
each with ``text`` and ``value``, plus the instruction length.
"""

from collections import namedtuple

from capstone import Cs, CS_ARCH_ARM64, CS_MODE_LITTLE_ENDIAN
from capstone.arm64_const import ARM64_OP_IMM, ARM64_OP_REG, ARM64_OP_MEM

InstructionToken = namedtuple("InstructionToken", ["text", "value"])


class CapstoneArchitecture:
    name = "aarch64"

    def __init__(self):
        self._cs = Cs(CS_ARCH_ARM64, CS_MODE_LITTLE_ENDIAN)
        self._cs.detail = True

    def _operand_token(self, insn, op):
        if op.type == ARM64_OP_REG:
            return InstructionToken(insn.reg_name(op.reg), 0)
        if op.type == ARM64_OP_IMM:
            return InstructionToken(hex(op.imm), op.imm)
        if op.type == ARM64_OP_MEM:
            return InstructionToken("[mem]", op.mem.disp)
        return InstructionToken("?", 0)

    def get_instruction_text(self, data, addr):
        insns = list(self._cs.disasm(bytes(data[:4]), addr, 1))
        if not insns:
            return None

        insn = insns[0]
        tokens = [InstructionToken(insn.mnemonic, 0)]
        tokens.extend(self._operand_token(insn, op) for op in insn.operands)
        return tokens, insn.size
