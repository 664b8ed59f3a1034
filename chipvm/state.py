"""Machine state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chipvm.config import Quirks, DEFAULT_QUIRKS
from chipvm.constants import (
    PROGRAM_START, FONT_START, FONT_DATA, MEMORY_SIZE, VRAM_SIZE,
    STACK_SIZE, NUM_REGISTERS, NUM_KEYS,
)
from chipvm.store import write_range


@dataclass
class StackState:
    """Call stack of return addresses."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))


class MachineState(PyTreeNode):
    """Complete machine state.

    ``vram`` is the packed display: pixel (x, y) is bit ``7 - x % 8`` of byte
    ``x // 8 + y * 8``.
    """
    rng: jax.Array
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    vram: jnp.ndarray = field(default_factory=lambda: jnp.zeros(VRAM_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keys: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    quirks: Quirks = field(pytree_node=False, default=DEFAULT_QUIRKS)


def reset_state(state: MachineState) -> MachineState:
    """Zero everything and put PC back at the program origin.

    The random key and quirks survive; the font is not reloaded.
    """
    return MachineState(rng=state.rng, quirks=state.quirks)


def load_font(state: MachineState) -> MachineState:
    memory, _ = write_range(state.memory, FONT_START, FONT_DATA)
    return state.replace(memory=memory)


def create_state(
    rng: jax.Array = jax.random.PRNGKey(0),
    quirks: Quirks = DEFAULT_QUIRKS,
) -> MachineState:
    """Create a booted machine state with the font loaded."""
    return load_font(MachineState(rng=rng, quirks=quirks))
