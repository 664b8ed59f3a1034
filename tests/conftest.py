"""Test configuration and fixtures for machine tests."""

import pytest
import jax.numpy as jnp
from chipvm import create_state, Machine, Quirks
from chipvm.logging import MachineLogger


@pytest.fixture
def fresh_state():
    """Provide a fresh machine state for each test."""
    return create_state()


@pytest.fixture
def reference_state():
    """Provide a fresh state with the reference interpreter's quirks."""
    return create_state(quirks=Quirks.preset("reference"))


@pytest.fixture
def cosmac_state():
    """Provide a fresh state with COSMAC VIP quirks."""
    return create_state(quirks=Quirks.preset("cosmac"))


@pytest.fixture
def quiet_logger():
    """Logger that records events without printing them."""
    return MachineLogger(log_level="CRITICAL")


@pytest.fixture
def machine(quiet_logger):
    """Provide a booted machine with a fixed seed."""
    return Machine(seed=0, logger=quiet_logger)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def pixel(state, x, y):
    """Read one display pixel from the packed VRAM."""
    byte = int(state.vram[x // 8 + y * 8])
    return (byte >> (7 - x % 8)) & 1


def program(*words):
    """Assemble instruction words into big-endian program bytes."""
    return b"".join(word.to_bytes(2, "big") for word in words)
