"""Control flow instructions.

PC already points past the current instruction when these run, so a skip adds
one more instruction width and a call pushes the return address as is.
"""

import jax
import jax.lax
import jax.numpy as jnp
from chipvm.state import MachineState
from chipvm.decode import DecodedInstruction
from chipvm.constants import INSTRUCTION_SIZE
from chipvm.stack import push


def execute_jump(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """2NNN - Call subroutine at NNN."""
    state = state.replace(stack=push(state.stack, state.pc))
    return execute_jump(state, instruction)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: MachineState, instruction: DecodedInstruction) -> MachineState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            lambda s: s.replace(pc=s.pc + INSTRUCTION_SIZE),
            lambda s: s,
            state
        )
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.kk
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.kk
)

# 5XY0 and 9XY0 with a non-zero last nibble are not instructions and never skip.
execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: (state.V[inst.x] == state.V[inst.y]) & (inst.n == 0)
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: (state.V[inst.x] != state.V[inst.y]) & (inst.n == 0)
)


def execute_jump_with_offset(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """BNNN - Jump to address NNN + V0 (NNN + VX with the jump_uses_vx quirk)."""
    register = instruction.x if state.quirks.jump_uses_vx else 0
    jump_address = instruction.nnn + jnp.astype(state.V[register], jnp.int32)
    return state.replace(pc=jnp.astype(jump_address, jnp.uint16))


def execute_skip_if_key(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """EX9E/EXA1 - Skip if key pressed/not pressed."""

    key_index = state.V[instruction.x] & 0xF
    key_pressed = state.keys[key_index]
    condition = jnp.where(
        instruction.kk == 0x9E,
        key_pressed,
        (instruction.kk == 0xA1) & ~key_pressed,
    )

    return jax.lax.cond(
        condition,
        lambda state: state.replace(pc=state.pc + INSTRUCTION_SIZE),
        lambda state: state,
        state
    )
