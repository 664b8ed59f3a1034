"""Fixed-capacity byte store operations.

A store is a 1-D ``uint8`` array. Reads past the end return the last byte and
writes past the end are dropped, so none of these functions ever fail inside a
traced computation.
"""

import jax.numpy as jnp
import numpy as np


def _index(addr) -> jnp.ndarray:
    return jnp.astype(addr, jnp.int32)


def read(store: jnp.ndarray, addr) -> jnp.ndarray:
    """Read one byte, clamping the address to the last valid cell."""
    return store[jnp.minimum(_index(addr), store.shape[0] - 1)]


def write(store: jnp.ndarray, addr, value) -> jnp.ndarray:
    """Write one byte; out-of-range addresses leave the store unchanged."""
    return store.at[_index(addr)].set(jnp.astype(value, store.dtype), mode="drop")


def _as_byte_array(data) -> jnp.ndarray:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return jnp.asarray(np.frombuffer(bytes(data), dtype=np.uint8))
    return jnp.asarray(data, dtype=jnp.uint8)


def write_range(store: jnp.ndarray, addr: int, data) -> tuple[jnp.ndarray, bool]:
    """Copy ``data`` to ``store[addr:]`` only if all of it fits.

    Returns the new store and whether the write happened. A rejected write
    returns the store untouched.
    """
    payload = _as_byte_array(data)
    end = addr + payload.shape[0]
    if addr < 0 or end > store.shape[0]:
        return store, False
    return store.at[addr:end].set(payload), True


def clear(store: jnp.ndarray) -> jnp.ndarray:
    return jnp.zeros_like(store)


def write_bit(store: jnp.ndarray, value, addr, offset) -> jnp.ndarray:
    """Place an 8-bit ``value`` starting ``offset`` bits into ``store[addr]``.

    The value straddles two cells: its high ``8 - offset`` bits replace the low
    bits of ``store[addr]`` and its remaining bits replace the high bits of
    ``store[addr + 1]``. Bits outside those masks are kept. Halves that fall
    outside the store are dropped.
    """
    value = jnp.astype(value, jnp.uint32) & 0xFF
    offset = jnp.astype(offset, jnp.uint32)
    addr = _index(addr)

    high_mask = jnp.uint32(0xFF) >> offset
    low_mask = (jnp.uint32(0xFF) << (8 - offset)) & 0xFF

    high = (jnp.astype(read(store, addr), jnp.uint32) & ~high_mask & 0xFF) | (value >> offset)
    store = write(store, addr, high)

    low = (jnp.astype(read(store, addr + 1), jnp.uint32) & ~low_mask & 0xFF) | ((value << (8 - offset)) & low_mask)
    return write(store, addr + 1, low)


def read_bits(store: jnp.ndarray, addr, offset) -> jnp.ndarray:
    """Read the 8 bits that ``write_bit`` would replace.

    Cells outside the store read as zero here, unlike ``read``, so callers can
    tell which bits actually exist.
    """
    offset = jnp.astype(offset, jnp.uint32)
    addr = _index(addr)
    size = store.shape[0]

    high = jnp.where(addr < size, jnp.astype(read(store, addr), jnp.uint32), 0)
    low = jnp.where(addr + 1 < size, jnp.astype(read(store, addr + 1), jnp.uint32), 0)
    return jnp.astype(((high << offset) | (low >> (8 - offset))) & 0xFF, jnp.uint8)
