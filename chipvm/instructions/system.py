"""System instructions (0x0xxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chipvm.state import MachineState
from chipvm.decode import DecodedInstruction
from chipvm.stack import pop
from chipvm.store import clear


def no_op(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """No operation."""
    return state


def execute_clear_screen(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """00E0 - Clear display."""
    return state.replace(vram=clear(state.vram))


def execute_return(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """00EE - Return from subroutine. An empty stack leaves PC alone."""
    stack, address, popped = pop(state.stack)
    return state.replace(stack=stack, pc=jnp.where(popped, address, state.pc))


def execute_system_instruction(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """Dispatch system instructions. 0NNN (SYS) is ignored."""
    return jax.lax.cond(
        0x00E0 == instruction.raw,
        execute_clear_screen,
        lambda state, instruction: jax.lax.cond(
            0x00EE == instruction.raw,
            execute_return,
            no_op,
            state, instruction
        ),
        state, instruction
    )
