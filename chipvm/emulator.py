"""Main execution engine: fetch, dispatch, timers."""

from functools import partial
from typing import Sequence, Union

import jax
import jax.lax
import jax.numpy as jnp
from chex import dataclass

from chipvm.state import MachineState
from chipvm.decode import decode, is_known
from chipvm.constants import PROGRAM_START, MEMORY_SIZE, NUM_KEYS, INSTRUCTION_SIZE
from chipvm.store import read, write_range
from chipvm.logging import scan_with_progress
from chipvm.instructions.system import execute_system_instruction
from chipvm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset, execute_skip_if_key
)
from chipvm.instructions.alu import execute_alu_operation
from chipvm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipvm.instructions.display import execute_display
from chipvm.instructions.misc import execute_misc_instruction


@dataclass(frozen=True)
class CycleReport:
    """What one cycle did: the PC it fetched from, the word, and whether it ran."""
    pc: jnp.ndarray
    word: jnp.ndarray
    known: jnp.ndarray
    executed: jnp.ndarray


def _execute(state: MachineState, instruction) -> MachineState:
    decoded_instruction = decode(instruction)

    return jax.lax.switch(
        decoded_instruction.opcode,
        [
            execute_system_instruction,
            execute_jump,
            execute_call,
            execute_skip_if_equal_immediate,
            execute_skip_if_not_equal_immediate,
            execute_skip_if_equal_register,
            execute_set,
            execute_add,
            execute_alu_operation,
            execute_skip_if_not_equal_register,
            execute_set_index,
            execute_jump_with_offset,
            execute_random,
            execute_display,
            execute_skip_if_key,
            execute_misc_instruction,
        ],
        state, decoded_instruction
    )


@jax.jit
def execute(state: MachineState, instruction: int) -> MachineState:
    """Execute a single instruction word against ``state``.

    PC is expected to already point past the instruction, as after ``fetch``.
    """
    return _execute(state, instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: MachineState) -> tuple[MachineState, jnp.uint16]:
    """Fetch next instruction from memory (big-endian) and advance PC."""
    address = jnp.astype(state.pc, jnp.int32)
    instruction = _pack_u16(read(state.memory, address), read(state.memory, address + 1))
    return state.replace(pc=state.pc + INSTRUCTION_SIZE), instruction


def tick_timers(state: MachineState) -> MachineState:
    """Count both timers down by one, stopping at zero."""
    return state.replace(
        delay_timer=jnp.astype(jnp.where(state.delay_timer > 0, state.delay_timer - 1, 0), jnp.uint8),
        sound_timer=jnp.astype(jnp.where(state.sound_timer > 0, state.sound_timer - 1, 0), jnp.uint8),
    )


def _cycle(state: MachineState) -> tuple[MachineState, CycleReport]:
    pc = state.pc
    in_bounds = jnp.astype(pc, jnp.int32) < MEMORY_SIZE

    def run(state):
        state, instruction = fetch(state)
        return _execute(state, instruction), instruction, is_known(decode(instruction))

    def idle(state):
        return state, jnp.zeros((), dtype=jnp.uint16), jnp.ones((), dtype=jnp.bool_)

    state, instruction, known = jax.lax.cond(in_bounds, run, idle, state)
    report = CycleReport(pc=pc, word=instruction, known=known, executed=in_bounds)
    return tick_timers(state), report


@jax.jit
def cycle(state: MachineState) -> tuple[MachineState, CycleReport]:
    """Run one machine cycle.

    Fetches, decodes and executes the instruction at PC when PC lies inside
    memory, then ticks the timers regardless.
    """
    return _cycle(state)


@partial(jax.jit, static_argnums=(1, 2))
def run_cycles(state: MachineState, n: int, progress: bool = False) -> tuple[MachineState, CycleReport]:
    """Run ``n`` cycles in one scan. Reports are stacked along the first axis."""
    def run_cycle(state, _):
        return _cycle(state)

    if progress:
        run_cycle = scan_with_progress(n, desc=f"Running ({n:,} cycles)")(run_cycle)

    return jax.lax.scan(run_cycle, state, jnp.arange(n))


def load_program(state: MachineState, data: Union[bytes, Sequence[int]]) -> tuple[MachineState, bool]:
    """Write a program at 0x200. Programs that do not fit are rejected whole."""
    memory, loaded = write_range(state.memory, PROGRAM_START, data)
    return state.replace(memory=memory), loaded


def load_rom(state: MachineState, filename: str) -> tuple[MachineState, bool]:
    """Load ROM file into memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)


def set_keys(state: MachineState, keys: Sequence[bool]) -> MachineState:
    """Latch the state of all 16 keys."""
    keys = jnp.asarray(keys, dtype=jnp.bool_)
    if keys.shape != (NUM_KEYS,):
        raise ValueError(f"Expected {NUM_KEYS} key states, got shape {keys.shape}")
    return state.replace(keys=keys)
