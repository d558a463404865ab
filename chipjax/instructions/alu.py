"""CHIP-8 ALU operations (8xxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction
from chipjax.constants import FLAG_REGISTER


def _operands(state: EmulatorState, instruction: DecodedInstruction) -> tuple[jnp.ndarray, jnp.ndarray]:
    return state.V[instruction.x], state.V[instruction.y]


def _store(state: EmulatorState, instruction: DecodedInstruction, result, flag=None) -> EmulatorState:
    """Write VX, then VF when the operation produces a flag."""
    new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
    if flag is not None:
        new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8))
    return state.replace(V=new_V)


def alu_set(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XY0 - Set: VX = VY."""
    vx, vy = _operands(state, instruction)
    return _store(state, instruction, vy)


def alu_or(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XY1 - Binary OR: VX |= VY."""
    vx, vy = _operands(state, instruction)
    return _store(state, instruction, vx | vy)


def alu_and(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XY2 - Binary AND: VX &= VY."""
    vx, vy = _operands(state, instruction)
    return _store(state, instruction, vx & vy)


def alu_xor(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XY3 - Logical XOR: VX ^= VY."""
    vx, vy = _operands(state, instruction)
    return _store(state, instruction, vx ^ vy)


def alu_add(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XY4 - Add: VX += VY, set carry flag."""
    vx, vy = _operands(state, instruction)
    result = jnp.astype(vx, jnp.uint16) + vy
    return _store(state, instruction, result & 0xFF, result > 0xFF)


def alu_sub_xy(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XY5 - Subtract: VX -= VY, VF = 1 when there is no borrow."""
    vx, vy = _operands(state, instruction)
    return _store(state, instruction, vx - vy, vx >= vy)


def alu_shift_right(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XY6 - Shift right: VX >>= 1, VF = shifted out bit."""
    vx, _ = _operands(state, instruction)
    return _store(state, instruction, vx >> 1, vx & 1)


def alu_sub_yx(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when there is no borrow."""
    vx, vy = _operands(state, instruction)
    return _store(state, instruction, vy - vx, vy >= vx)


def alu_shift_left(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYE - Shift left: VX <<= 1, VF = shifted out bit."""
    vx, _ = _operands(state, instruction)
    return _store(state, instruction, vx << 1, (vx & 0x80) >> 7)


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher.

    Only defined N values reach this point, so 0-7 map to themselves and E
    maps to the last branch.
    """
    return jax.lax.switch(
        jnp.where(instruction.n == 0xE, 8, instruction.n),
        [alu_set, alu_or, alu_and, alu_xor, alu_add,
         alu_sub_xy, alu_shift_right, alu_sub_yx, alu_shift_left],
        state, instruction
    )
