"""Tests for control flow instructions."""

import pytest
from chipjax import execute, press_key, FAULT_STACK_OVERFLOW, STACK_SIZE
from conftest import set_registers


class TestJump:
    """Test jump instructions."""

    def test_execute_jump(self, fresh_state):
        """1NNN - Jump to address."""
        state = execute(fresh_state, 0x1001)
        assert state.pc == 1

    def test_jump_with_offset(self, fresh_state):
        """BNNN - Jump with V0 offset."""
        state = execute(fresh_state, 0x6010)  # V0 = 0x10
        state = execute(state, 0x6230)  # V2 = 0x30, ignored
        state = execute(state, 0xB250)  # Jump to 0x250 + V0
        assert state.pc == 0x260

    def test_jump_with_offset_wraps_address_space(self, fresh_state):
        """BNNN - The target stays inside the 12-bit address space."""
        state = set_registers(fresh_state, V0=0xFF)
        state = execute(state, 0xBFF0)
        assert state.pc == (0xFF0 + 0xFF) & 0xFFF


class TestCall:
    """Test subroutine calls."""

    def test_call_pushes_return_address(self, fresh_state):
        """2NNN - Push PC and jump."""
        state = fresh_state.replace(pc=fresh_state.pc + 2)  # as left by fetch

        state = execute(state, 0x2300)

        assert state.pc == 0x300
        assert state.stack.pointer == 1
        assert state.stack.data[0] == 0x202

    def test_call_overflow(self, fresh_state):
        """2NNN - A seventeenth nested call faults and leaves the stack alone."""
        state = fresh_state
        for _ in range(STACK_SIZE):
            state = execute(state, 0x2300)
        assert state.stack.pointer == STACK_SIZE

        faulted = execute(state, 0x2400)

        assert faulted.fault == FAULT_STACK_OVERFLOW
        assert faulted.pc == state.pc
        assert faulted.stack.pointer == STACK_SIZE


class TestSkipInstructions:
    """Test all skip instruction variants."""

    @pytest.mark.parametrize("registers,instruction,skips", [
        ({"V5": 0x42}, 0x3542, True),   # 3XNN equal
        ({"V5": 0x41}, 0x3542, False),
        ({"V3": 0x10}, 0x4320, True),   # 4XNN not equal
        ({"V3": 0x20}, 0x4320, False),
        ({"V1": 0x55, "V2": 0x55}, 0x5120, True),   # 5XY0 equal
        ({"V1": 0x55, "V2": 0x44}, 0x5120, False),
        ({"V7": 0xAA, "V8": 0xBB}, 0x9780, True),   # 9XY0 not equal
        ({"V7": 0xCC, "V8": 0xCC}, 0x9780, False),
    ])
    def test_skip(self, fresh_state, registers, instruction, skips):
        state = set_registers(fresh_state, **registers)
        initial_pc = state.pc

        state = execute(state, instruction)

        assert state.pc == initial_pc + (2 if skips else 0)

    def test_skip_with_zero_values(self, fresh_state):
        """3X00 - Fresh registers are zero."""
        initial_pc = fresh_state.pc
        state = execute(fresh_state, 0x3000)  # Skip if V0 == 0
        assert state.pc == initial_pc + 2

    def test_skip_boundary_values(self, fresh_state):
        """3XFF - Boundary byte value."""
        state = set_registers(fresh_state, V0=0xFF)
        initial_pc = state.pc

        state = execute(state, 0x30FF)  # Skip if V0 == 255
        assert state.pc == initial_pc + 2


class TestKeySkips:
    """Test EX9E/EXA1."""

    def test_skip_if_key_pressed(self, fresh_state):
        """EX9E - Skip if key VX pressed."""
        state = set_registers(fresh_state, V0=5)
        state = press_key(state, 5)
        initial_pc = state.pc

        state = execute(state, 0xE09E)
        assert state.pc == initial_pc + 2

    def test_no_skip_if_key_released(self, fresh_state):
        """EX9E - No skip when the key is up."""
        state = set_registers(fresh_state, V0=5)
        initial_pc = state.pc

        state = execute(state, 0xE09E)
        assert state.pc == initial_pc

    def test_skip_if_key_not_pressed(self, fresh_state):
        """EXA1 - Skip if key VX not pressed."""
        state = set_registers(fresh_state, V0=5)
        initial_pc = state.pc

        state = execute(state, 0xE0A1)
        assert state.pc == initial_pc + 2

    def test_no_skip_if_key_not_pressed_but_held(self, fresh_state):
        """EXA1 - No skip while the key is held."""
        state = set_registers(fresh_state, V4=0xC)
        state = press_key(state, 0xC)
        initial_pc = state.pc

        state = execute(state, 0xE4A1)
        assert state.pc == initial_pc
