"""Call stack operations.

Both operations saturate: a push onto a full stack and a pop from an empty
one leave the stack as it was.
"""

import jax.numpy as jnp
from chipvm.constants import STACK_SIZE
from chipvm.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack."""
    has_room = stack.pointer < STACK_SIZE
    slot = jnp.minimum(stack.pointer, STACK_SIZE - 1)
    new_data = jnp.where(
        has_room,
        stack.data.at[slot].set(jnp.astype(address, jnp.uint16)),
        stack.data,
    )
    new_pointer = jnp.where(has_room, stack.pointer + 1, stack.pointer)
    return stack.replace(data=new_data, pointer=jnp.astype(new_pointer, jnp.int32))


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray, jnp.ndarray]:
    """Pop address from stack.

    Returns the new stack, the address and whether anything was popped.
    """
    has_entry = stack.pointer > 0
    new_pointer = jnp.astype(jnp.where(has_entry, stack.pointer - 1, stack.pointer), jnp.int32)
    popped_address = stack.data[new_pointer]
    new_data = jnp.where(has_entry, stack.data.at[new_pointer].set(0), stack.data)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address, has_entry
