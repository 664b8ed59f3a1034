"""Display operations."""

import jax
import jax.numpy as jnp
from chipvm.state import MachineState
from chipvm.decode import DecodedInstruction
from chipvm.constants import SCREEN_WIDTH, SCREEN_HEIGHT, BYTES_PER_ROW, SPRITE_WIDTH, FLAG_REGISTER
from chipvm.store import read, read_bits, write_bit

MAX_SPRITE_HEIGHT = 15


def execute_display(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """DXYN - XOR an N-row sprite from memory[I] onto the display at (VX, VY).

    The start position wraps around the screen. Each sprite row lands at byte
    ``x // 8 + row * 8`` with bit offset ``x % 8``, so a sprite crossing the
    right edge carries on into the first byte of the next row and rows below
    the screen are dropped. VF is set when any lit pixel is switched off.
    """
    sprite_x = jnp.astype(state.V[instruction.x], jnp.int32) % SCREEN_WIDTH
    sprite_y = jnp.astype(state.V[instruction.y], jnp.int32) % SCREEN_HEIGHT
    column = sprite_x // SPRITE_WIDTH
    offset = sprite_x % SPRITE_WIDTH
    base = jnp.astype(state.I, jnp.int32)

    def draw_row(row, carry):
        vram, collision = carry
        sprite = jnp.where(row < instruction.n, read(state.memory, base + row), 0)
        sprite = jnp.astype(sprite, jnp.uint8)
        address = column + (sprite_y + row) * BYTES_PER_ROW

        current = read_bits(vram, address, offset)
        collision = collision | ((current & sprite) != 0)
        return write_bit(vram, current ^ sprite, address, offset), collision

    vram, collision = jax.lax.fori_loop(
        0, MAX_SPRITE_HEIGHT, draw_row, (state.vram, jnp.zeros((), dtype=jnp.bool_))
    )

    return state.replace(
        vram=vram,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )
