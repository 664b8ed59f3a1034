"""Instruction decoding."""

import jax.numpy as jnp
from chex import dataclass

# Low nibbles of the 8XYN family, low bytes of the EX and FX families.
ALU_OPERATIONS = (0x0, 0x1, 0x2, 0x3, 0x4, 0x5, 0x6, 0x7, 0xE)
KEY_OPERATIONS = (0x9E, 0xA1)
MISC_OPERATIONS = (0x07, 0x0A, 0x15, 0x18, 0x1E, 0x29, 0x33, 0x55, 0x65)


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded instruction with extracted operands."""
    raw: int
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    kk: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    return DecodedInstruction(
        raw=instruction,
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        kk=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


def is_known(instruction: DecodedInstruction) -> jnp.ndarray:
    """Whether a decoded word is one of the 35 instructions (traceable)."""
    opcode = instruction.opcode
    return jnp.select(
        [
            (opcode == 0x5) | (opcode == 0x9),
            opcode == 0x8,
            opcode == 0xE,
            opcode == 0xF,
        ],
        [
            instruction.n == 0,
            jnp.isin(instruction.n, jnp.array(ALU_OPERATIONS)),
            jnp.isin(instruction.kk, jnp.array(KEY_OPERATIONS)),
            jnp.isin(instruction.kk, jnp.array(MISC_OPERATIONS)),
        ],
        default=True,
    )


def is_known_opcode(word: int) -> bool:
    """Plain-Python counterpart of ``is_known`` for concrete words."""
    opcode = (word & 0xF000) >> 12
    if opcode in (0x5, 0x9):
        return (word & 0x000F) == 0
    if opcode == 0x8:
        return (word & 0x000F) in ALU_OPERATIONS
    if opcode == 0xE:
        return (word & 0x00FF) in KEY_OPERATIONS
    if opcode == 0xF:
        return (word & 0x00FF) in MISC_OPERATIONS
    return True
