"""Miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np
from chipvm.state import MachineState
from chipvm.decode import DecodedInstruction
from chipvm.constants import FONT_START, FONT_HEIGHT, NUM_REGISTERS, INSTRUCTION_SIZE
from chipvm.instructions.system import no_op
from chipvm.store import read, write


def execute_get_delay_timer(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX1E - Add VX to I register. I wraps at 16 bits; VF is untouched."""
    new_i = jnp.astype(state.I, jnp.int32) + jnp.astype(state.V[instruction.x], jnp.int32)
    return state.replace(I=jnp.astype(new_i & 0xFFFF, jnp.uint16))


def execute_wait_for_key(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX0A - Wait for key press.

    With no key down PC is moved back onto this instruction, so it runs again
    next cycle. Otherwise the lowest pressed key goes into VX.
    """
    def key_pressed_action(state):
        pressed_key = jnp.astype(jnp.argmax(state.keys), jnp.uint8)
        return state.replace(V=state.V.at[instruction.x].set(pressed_key))

    def wait_action(state):
        return state.replace(pc=state.pc - INSTRUCTION_SIZE)

    return jax.lax.cond(jnp.any(state.keys), key_pressed_action, wait_action, state)


def execute_font_character(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX29 - Set I to location of sprite for digit VX."""
    base = 0 if state.quirks.font_ignores_base else FONT_START
    font_address = base + jnp.astype(state.V[instruction.x], jnp.int32) * FONT_HEIGHT
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


def execute_bcd_conversion(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]
    address = jnp.astype(state.I, jnp.int32)

    memory = write(state.memory, address, value // 100)
    memory = write(memory, address + 1, (value // 10) % 10)
    memory = write(memory, address + 2, value % 10)
    return state.replace(memory=memory)


def _register_count(state: MachineState, instruction: DecodedInstruction) -> jnp.ndarray:
    count = jnp.astype(instruction.x, jnp.int32)
    if state.quirks.exclusive_register_bound:
        return count
    return count + 1


def _advance_index(state: MachineState, count: jnp.ndarray) -> jnp.ndarray:
    if state.quirks.memory_increments_index:
        return jnp.astype(jnp.astype(state.I, jnp.int32) + count, jnp.uint16)
    return state.I


def execute_store_registers(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX55 - Store V0 through VX in memory starting at I."""
    count = _register_count(state, instruction)
    base = jnp.astype(state.I, jnp.int32)

    def store_register(i, memory):
        address = base + i
        value = jnp.where(i < count, state.V[i], read(memory, address))
        return write(memory, address, value)

    memory = jax.lax.fori_loop(0, NUM_REGISTERS, store_register, state.memory)
    return state.replace(memory=memory, I=_advance_index(state, count))


def execute_load_registers(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX65 - Load V0 through VX from memory starting at I."""
    count = _register_count(state, instruction)
    base = jnp.astype(state.I, jnp.int32)

    def load_register(i, registers):
        value = jnp.where(i < count, read(state.memory, base + i), registers[i])
        return registers.at[i].set(value)

    registers = jax.lax.fori_loop(0, NUM_REGISTERS, load_register, state.V)
    return state.replace(V=registers, I=_advance_index(state, count))


_MISC_HANDLERS = {
    0x07: execute_get_delay_timer,
    0x0A: execute_wait_for_key,
    0x15: execute_set_delay_timer,
    0x18: execute_set_sound_timer,
    0x1E: execute_add_to_index,
    0x29: execute_font_character,
    0x33: execute_bcd_conversion,
    0x55: execute_store_registers,
    0x65: execute_load_registers,
}

# Branch index for every low byte; unlisted bytes fall through to no_op.
_BRANCH_INDEX = np.full(256, len(_MISC_HANDLERS), dtype=np.int32)
_BRANCH_INDEX[list(_MISC_HANDLERS)] = np.arange(len(_MISC_HANDLERS))


def execute_misc_instruction(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """Dispatch misc instructions on the low byte."""
    return jax.lax.switch(
        jnp.asarray(_BRANCH_INDEX)[instruction.kk],
        [*_MISC_HANDLERS.values(), no_op],
        state, instruction
    )
