"""Full machine state snapshots.

A snapshot is the raw concatenation of every piece of machine state, with no
header: memory, vram, V, I, stack data, stack pointer, PC, delay timer, sound
timer, keys. Multi-byte values are big-endian. The random key and the quirks
are configuration, not state, and are not included.
"""

from typing import Optional

import jax.numpy as jnp
import numpy as np

from chipvm.constants import MEMORY_SIZE, VRAM_SIZE, NUM_REGISTERS, STACK_SIZE, NUM_KEYS
from chipvm.state import MachineState

# (name, element count, wire dtype, state dtype)
SNAPSHOT_LAYOUT = (
    ("memory", MEMORY_SIZE, np.dtype("u1"), np.uint8),
    ("vram", VRAM_SIZE, np.dtype("u1"), np.uint8),
    ("V", NUM_REGISTERS, np.dtype("u1"), np.uint8),
    ("I", 1, np.dtype(">u2"), np.uint16),
    ("stack_data", STACK_SIZE, np.dtype(">u2"), np.uint16),
    ("stack_pointer", 1, np.dtype("u1"), np.int32),
    ("pc", 1, np.dtype(">u2"), np.uint16),
    ("delay_timer", 1, np.dtype("u1"), np.uint8),
    ("sound_timer", 1, np.dtype("u1"), np.uint8),
    ("keys", NUM_KEYS, np.dtype("u1"), np.bool_),
)

SNAPSHOT_SIZE = sum(count * wire.itemsize for _, count, wire, _ in SNAPSHOT_LAYOUT)


def _fields(state: MachineState) -> dict:
    return {
        "memory": state.memory,
        "vram": state.vram,
        "V": state.V,
        "I": state.I,
        "stack_data": state.stack.data,
        "stack_pointer": state.stack.pointer,
        "pc": state.pc,
        "delay_timer": state.delay_timer,
        "sound_timer": state.sound_timer,
        "keys": state.keys,
    }


def serialize(state: MachineState) -> bytes:
    """Pack the machine state into ``SNAPSHOT_SIZE`` bytes."""
    fields = _fields(state)
    return b"".join(
        np.asarray(fields[name]).reshape(count).astype(wire).tobytes()
        for name, count, wire, _ in SNAPSHOT_LAYOUT
    )


def restore(state: MachineState, data: bytes) -> Optional[MachineState]:
    """Rebuild a state from a snapshot, or return None if the size is wrong.

    The random key and quirks are taken from ``state``.
    """
    if len(data) != SNAPSHOT_SIZE:
        return None

    values = {}
    offset = 0
    for name, count, wire, dtype in SNAPSHOT_LAYOUT:
        raw = np.frombuffer(data, dtype=wire, count=count, offset=offset)
        offset += count * wire.itemsize
        value = jnp.asarray(raw.astype(dtype))
        values[name] = value[0] if count == 1 else value

    return state.replace(
        memory=values["memory"],
        vram=values["vram"],
        V=values["V"],
        I=values["I"],
        stack=state.stack.replace(data=values["stack_data"], pointer=values["stack_pointer"]),
        pc=values["pc"],
        delay_timer=values["delay_timer"],
        sound_timer=values["sound_timer"],
        keys=values["keys"],
    )
