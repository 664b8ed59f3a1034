"""Tests for control flow instructions."""

import pytest
from chipvm import execute, create_state, Quirks


class TestJump:
    """Test jump instructions."""

    def test_execute_jump(self, fresh_state):
        """Test 1NNN - Jump to address."""
        state = execute(fresh_state, 0x1001)
        assert state.pc == 1

    def test_jump_to_top_of_memory(self, fresh_state):
        """1NNN - Full 12-bit target."""
        state = execute(fresh_state, 0x1FFE)
        assert state.pc == 0xFFE


class TestSkipInstructions:
    """Test all skip instruction variants."""

    def test_skip_if_equal_immediate_true(self, fresh_state):
        """3XKK - Should skip when VX == KK."""
        state = fresh_state.replace(V=fresh_state.V.at[5].set(0x42))
        initial_pc = state.pc

        state = execute(state, 0x3542)  # Skip if V5 == 0x42
        assert state.pc == initial_pc + 2

    def test_skip_if_equal_immediate_false(self, fresh_state):
        """3XKK - Should not skip when VX != KK."""
        state = fresh_state.replace(V=fresh_state.V.at[5].set(0x41))
        initial_pc = state.pc

        state = execute(state, 0x3542)  # Skip if V5 == 0x42
        assert state.pc == initial_pc

    def test_skip_if_not_equal_immediate_true(self, fresh_state):
        """4XKK - Should skip when VX != KK."""
        state = fresh_state.replace(V=fresh_state.V.at[3].set(0x10))
        initial_pc = state.pc

        state = execute(state, 0x4320)  # Skip if V3 != 0x20
        assert state.pc == initial_pc + 2

    def test_skip_if_not_equal_immediate_false(self, fresh_state):
        """4XKK - Should not skip when VX == KK."""
        state = fresh_state.replace(V=fresh_state.V.at[3].set(0x20))
        initial_pc = state.pc

        state = execute(state, 0x4320)  # Skip if V3 != 0x20
        assert state.pc == initial_pc

    def test_skip_if_equal_register_true(self, fresh_state):
        """5XY0 - Should skip when VX == VY."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x55))
        state = state.replace(V=state.V.at[2].set(0x55))
        initial_pc = state.pc

        state = execute(state, 0x5120)  # Skip if V1 == V2
        assert state.pc == initial_pc + 2

    def test_skip_if_equal_register_false(self, fresh_state):
        """5XY0 - Should not skip when VX != VY."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x55))
        state = state.replace(V=state.V.at[2].set(0x44))
        initial_pc = state.pc

        state = execute(state, 0x5120)  # Skip if V1 == V2
        assert state.pc == initial_pc

    def test_skip_if_not_equal_register_true(self, fresh_state):
        """9XY0 - Should skip when VX != VY."""
        state = fresh_state
        state = state.replace(V=state.V.at[7].set(0xAA))
        state = state.replace(V=state.V.at[8].set(0xBB))
        initial_pc = state.pc

        state = execute(state, 0x9780)  # Skip if V7 != V8
        assert state.pc == initial_pc + 2

    def test_skip_if_not_equal_register_false(self, fresh_state):
        """9XY0 - Should not skip when VX == VY."""
        state = fresh_state
        state = state.replace(V=state.V.at[7].set(0xCC))
        state = state.replace(V=state.V.at[8].set(0xCC))
        initial_pc = state.pc

        state = execute(state, 0x9780)  # Skip if V7 != V8
        assert state.pc == initial_pc

    @pytest.mark.parametrize("instruction", [0x5121, 0x512F, 0x9121, 0x912F])
    def test_register_skip_with_nonzero_low_nibble(self, fresh_state, instruction):
        """5XYN/9XYN with N != 0 are not instructions and never skip."""
        state = fresh_state.replace(V=fresh_state.V.at[2].set(0x01))
        initial_pc = state.pc

        assert execute(state, instruction).pc == initial_pc
        assert execute(fresh_state, instruction).pc == initial_pc

    def test_skip_with_zero_values(self, fresh_state):
        """Test skip instructions with zero values."""
        state = fresh_state
        initial_pc = state.pc

        # V0 == 0, should skip
        state = execute(state, 0x3000)  # Skip if V0 == 0
        assert state.pc == initial_pc + 2

    def test_skip_boundary_values(self, fresh_state):
        """Test skip instructions with boundary values."""
        state = fresh_state.replace(V=fresh_state.V.at[0].set(0xFF))
        initial_pc = state.pc

        state = execute(state, 0x30FF)  # Skip if V0 == 255
        assert state.pc == initial_pc + 2


class TestKeySkips:
    """Test EX9E / EXA1."""

    def test_skip_if_key_pressed(self, fresh_state):
        """EX9E - Skip if key VX is down."""
        state = execute(fresh_state, 0x6005)  # V0 = 5
        state = state.replace(keys=state.keys.at[5].set(True))
        initial_pc = state.pc

        state = execute(state, 0xE09E)
        assert state.pc == initial_pc + 2

    def test_no_skip_if_key_released(self, fresh_state):
        """EX9E - No skip when the key is up."""
        state = execute(fresh_state, 0x6005)
        initial_pc = state.pc

        state = execute(state, 0xE09E)
        assert state.pc == initial_pc

    def test_skip_if_key_not_pressed(self, fresh_state):
        """EXA1 - Skip if key VX is up."""
        state = execute(fresh_state, 0x6005)
        initial_pc = state.pc

        state = execute(state, 0xE0A1)
        assert state.pc == initial_pc + 2

    def test_no_skip_if_key_held(self, fresh_state):
        """EXA1 - No skip when the key is down."""
        state = execute(fresh_state, 0x6005)
        state = state.replace(keys=state.keys.at[5].set(True))
        initial_pc = state.pc

        state = execute(state, 0xE0A1)
        assert state.pc == initial_pc

    def test_key_index_uses_low_nibble(self, fresh_state):
        """EX9E - Only the low nibble of VX selects the key."""
        state = execute(fresh_state, 0x60F3)  # V0 = 0xF3 → key 3
        state = state.replace(keys=state.keys.at[3].set(True))
        initial_pc = state.pc

        state = execute(state, 0xE09E)
        assert state.pc == initial_pc + 2

    def test_unknown_key_operation_is_ignored(self, fresh_state):
        """EXkk other than 9E/A1 does nothing."""
        state = fresh_state.replace(keys=fresh_state.keys.at[0].set(True))
        initial_pc = state.pc

        assert execute(state, 0xE000).pc == initial_pc
        assert execute(fresh_state, 0xE0FF).pc == initial_pc


class TestJumpWithOffset:
    """Test jump with offset under both quirk settings."""

    def test_jump_with_offset_default(self, fresh_state):
        """BNNN - Jump with V0 offset."""
        state = execute(fresh_state, 0x6010)  # V0 = 0x10
        state = execute(state, 0xB250)  # Jump to 0x250 + V0
        assert state.pc == 0x260

    def test_jump_with_offset_is_not_masked(self, fresh_state):
        """BNNN - The target may run past 0xFFF."""
        state = execute(fresh_state, 0x60FF)  # V0 = 0xFF
        state = execute(state, 0xBFFF)
        assert state.pc == 0xFFF + 0xFF

    def test_jump_with_offset_vx_quirk(self):
        """BXNN - Jump with VX offset under jump_uses_vx."""
        state = create_state(quirks=Quirks(jump_uses_vx=True))
        state = execute(state, 0x6210)  # V2 = 0x10
        state = execute(state, 0xB250)  # Jump to 0x250 + V2
        assert state.pc == 0x260

    def test_jump_mode_comparison(self):
        """Test that jump_uses_vx changes which register is added."""
        # Default: B250 = Jump to 0x250 + V0
        state_default = create_state()
        state_default = execute(state_default, 0x6010)  # V0 = 0x10
        state_default = execute(state_default, 0x6230)  # V2 = 0x30
        state_default = execute(state_default, 0xB250)

        # Quirk: B250 = Jump to 0x250 + V2
        state_vx = create_state(quirks=Quirks(jump_uses_vx=True))
        state_vx = execute(state_vx, 0x6010)  # V0 = 0x10
        state_vx = execute(state_vx, 0x6230)  # V2 = 0x30
        state_vx = execute(state_vx, 0xB250)

        assert state_default.pc == 0x260  # 0x250 + 0x10 (used V0)
        assert state_vx.pc == 0x280  # 0x250 + 0x30 (used V2)
