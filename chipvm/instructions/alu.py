"""ALU operations (8xxx).

Every operation returns ``(result, flag)``. Arithmetic is done in int32 so the
flag comes from the full-width value, not the truncated byte stored in VX.
"""

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np
from chipvm.state import MachineState
from chipvm.decode import DecodedInstruction, ALU_OPERATIONS
from chipvm.constants import FLAG_REGISTER


def _byte(value) -> jnp.ndarray:
    return jnp.astype(value, jnp.uint8)


def _wide(value) -> jnp.ndarray:
    return jnp.astype(value, jnp.int32)


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return _byte(vy), _byte(0)


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY."""
    return _byte(vx | vy), _byte(0)


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY."""
    return _byte(vx & vy), _byte(0)


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY."""
    return _byte(vx ^ vy), _byte(0)


def alu_add(vx, vy):
    """8XY4 - Add: VX += VY, set carry flag."""
    result = _wide(vx) + _wide(vy)
    return _byte(result & 0xFF), _byte(result > 0xFF)


def alu_sub_xy(vx, vy):
    """8XY5 - Subtract: VX -= VY, VF = not borrow."""
    result = _wide(vx) - _wide(vy)
    return _byte(result & 0xFF), _byte(result >= 0)


def alu_shift_right(source):
    """8XY6 - Shift right, VF = bit shifted out."""
    return _byte(source >> 1), _byte(source & 1)


def alu_sub_yx(vx, vy):
    """8XY7 - Subtract: VX = VY - VX, VF = not borrow."""
    result = _wide(vy) - _wide(vx)
    return _byte(result & 0xFF), _byte(result >= 0)


def alu_shift_left(source):
    """8XYE - Shift left, VF = bit shifted out."""
    return _byte((_wide(source) << 1) & 0xFF), _byte((source >> 7) & 1)


def alu_undefined(vx, vy):
    """8XY8-8XYD, 8XYF - not instructions."""
    return _byte(vx), _byte(0)


# Operation index for each low nibble; anything else maps to alu_undefined.
_UNDEFINED_INDEX = len(ALU_OPERATIONS)
_OPERATION_INDEX = np.full(16, _UNDEFINED_INDEX, dtype=np.int32)
_OPERATION_INDEX[list(ALU_OPERATIONS)] = np.arange(len(ALU_OPERATIONS))

_SETS_FLAG = np.zeros(16, dtype=np.bool_)
_SETS_FLAG[[0x4, 0x5, 0x6, 0x7, 0xE]] = True

_LOGIC = np.zeros(16, dtype=np.bool_)
_LOGIC[[0x1, 0x2, 0x3]] = True


def execute_alu_operation(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """8XYN - ALU operations dispatcher."""
    vx = state.V[instruction.x]
    vy = state.V[instruction.y]
    quirks = state.quirks

    def _alu_shift_right(vx, vy):
        return alu_shift_right(vy if quirks.shift_uses_vy else vx)

    def _alu_shift_left(vx, vy):
        return alu_shift_left(vy if quirks.shift_uses_vy else vx)

    result, flag = jax.lax.switch(
        jnp.asarray(_OPERATION_INDEX)[instruction.n],
        [alu_set, alu_or, alu_and, alu_xor, alu_add,
         alu_sub_xy, _alu_shift_right, alu_sub_yx, _alu_shift_left,
         alu_undefined],
        vx, vy
    )

    sets_flag = jnp.asarray(_SETS_FLAG)[instruction.n]
    if quirks.logic_resets_vf:
        sets_flag = sets_flag | jnp.asarray(_LOGIC)[instruction.n]

    # VF is written after VX so that the flag wins when X is F.
    new_V = state.V.at[instruction.x].set(result)
    new_V = new_V.at[FLAG_REGISTER].set(jnp.where(sets_flag, flag, new_V[FLAG_REGISTER]))
    return state.replace(V=new_V)
