"""CHIP-8 system instructions (0x0xxx) and fault signalling."""

import jax
import jax.lax
import jax.numpy as jnp
from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction
from chipjax.stack import pop, is_empty
from chipjax.constants import FAULT_UNDEFINED_OPCODE, FAULT_STACK_UNDERFLOW


def signal_fault(state: EmulatorState, code: int) -> EmulatorState:
    """Mark the state as faulted, leaving every other field untouched."""
    return state.replace(fault=jnp.astype(code, jnp.uint8))


def undefined_opcode(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Any opcode outside the CHIP-8 table."""
    return signal_fault(state, FAULT_UNDEFINED_OPCODE)


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    def _return(state):
        stack, address = pop(state.stack)
        return state.replace(stack=stack, pc=address)

    return jax.lax.cond(
        is_empty(state.stack),
        lambda s: signal_fault(s, FAULT_STACK_UNDERFLOW),
        _return,
        state
    )


def execute_system_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch system instructions."""
    return jax.lax.cond(
        instruction.nn == 0xEE,
        execute_return,
        execute_clear_screen,
        state, instruction
    )
