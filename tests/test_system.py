"""Tests for system instructions (0xxx)."""

import jax.numpy as jnp
from chipjax import execute, FAULT_STACK_UNDERFLOW, FAULT_UNDEFINED_OPCODE


def test_execute_clear_screen(fresh_state):
    """Test 00E0 - Clear display."""
    state = fresh_state.replace(display=fresh_state.display.at[0, 0].set(True).at[63, 31].set(True))

    state = execute(state, 0x00E0)

    assert jnp.sum(state.display) == 0


def test_execute_call_and_return(fresh_state):
    """Test 2NNN (call) and 00EE (return) together."""
    state = fresh_state
    initial_pc = state.pc

    state = execute(state, 0x2300)  # Call 0x300
    assert state.pc == 0x300
    assert state.stack.data[state.stack.pointer - 1] == initial_pc

    state = execute(state, 0x00EE)  # Return
    assert state.pc == initial_pc
    assert state.stack.pointer == 0


def test_nested_calls_return_in_order(fresh_state):
    """Returns unwind in reverse call order."""
    state = execute(fresh_state, 0x2300)
    state = execute(state, 0x2400)
    assert state.stack.pointer == 2

    state = execute(state, 0x00EE)
    assert state.pc == 0x300
    state = execute(state, 0x00EE)
    assert state.pc == 0x200


def test_return_on_empty_stack_faults(fresh_state):
    """00EE - Empty stack is a stack underflow."""
    state = execute(fresh_state, 0x00EE)

    assert state.fault == FAULT_STACK_UNDERFLOW
    assert state.pc == fresh_state.pc
    assert state.stack.pointer == 0


def test_machine_code_routine_is_undefined(fresh_state):
    """0NNN - Calls into native code are not supported."""
    for instruction in (0x0000, 0x0123, 0x01E0, 0x00E1):
        state = execute(fresh_state, instruction)
        assert state.fault == FAULT_UNDEFINED_OPCODE, f"0x{instruction:04X} should fault"
