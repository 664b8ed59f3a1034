"""CHIP-8 virtual machine package."""

from chipvm.state import MachineState, create_state, reset_state
from chipvm.emulator import execute, fetch, cycle, run_cycles, load_program, load_rom, set_keys
from chipvm.decode import DecodedInstruction, decode, is_known, is_known_opcode
from chipvm.disassemble import disassemble
from chipvm.config import Quirks
from chipvm.constants import *
from chipvm.machine import Machine
from chipvm.rendering import unpack_vram, vram_to_rgb, vram_to_text, create_color_scheme

__all__ = [
    "MachineState",
    "create_state",
    "reset_state",
    "fetch",
    "execute",
    "cycle",
    "run_cycles",
    "load_program",
    "load_rom",
    "set_keys",
    "DecodedInstruction",
    "decode",
    "is_known",
    "is_known_opcode",
    "disassemble",
    "Quirks",
    "Machine",
    "PROGRAM_START",
    "FONT_START",
    "MEMORY_SIZE",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "unpack_vram",
    "vram_to_rgb",
    "vram_to_text",
    "create_color_scheme",
]
