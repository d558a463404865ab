"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction, MISC_OPS
from chipjax.constants import FONT_START, FONT_CHAR_SIZE, ADDRESS_MASK, NO_KEY, NUM_REGISTERS


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    The first execution arms ``awaiting_key`` and rewinds the program counter
    so the instruction runs again on the next step. Once the driver has
    latched a fresh press into ``last_key``, the key is stored in VX and
    execution continues.
    """
    def key_pressed_action(state):
        return state.replace(
            V=state.V.at[instruction.x].set(jnp.astype(state.last_key, jnp.uint8)),
            last_key=jnp.astype(NO_KEY, jnp.int8),
            awaiting_key=jnp.zeros((), dtype=jnp.bool_),
        )

    def wait_action(state):
        return state.replace(
            pc=jnp.astype(state.pc - 2, jnp.uint16),
            last_key=jnp.astype(NO_KEY, jnp.int8),
            awaiting_key=jnp.ones((), dtype=jnp.bool_),
        )

    satisfied = state.awaiting_key & (state.last_key != NO_KEY)
    return jax.lax.cond(satisfied, key_pressed_action, wait_action, state)


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register, VF is not affected."""
    return state.replace(I=jnp.astype(state.I + state.V[instruction.x], jnp.uint16))


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    digit = jnp.astype(state.V[instruction.x] & 0xF, jnp.uint16)
    return state.replace(I=jnp.astype(FONT_START + digit * FONT_CHAR_SIZE, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = (jnp.arange(3) + state.I) & ADDRESS_MASK
    return state.replace(memory=state.memory.at[indices].set(digits))


def _register_window(state: EmulatorState, instruction: DecodedInstruction):
    """Register mask V0..VX and the memory addresses they map to."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = (state.I + jnp.arange(NUM_REGISTERS)) & ADDRESS_MASK
    return register_mask, base_indices


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I."""
    register_mask, base_indices = _register_window(state, instruction)
    current_memory_values = state.memory[base_indices]
    new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
    return state.replace(memory=state.memory.at[base_indices].set(new_memory_values))


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I."""
    register_mask, base_indices = _register_window(state, instruction)
    new_V = jnp.where(register_mask, state.memory[base_indices], state.V)
    return state.replace(V=new_V)


# Maps the low byte of an FXNN opcode to its branch in execute_misc_instruction
MISC_INDEX = jnp.zeros(256, dtype=jnp.int32).at[jnp.array(MISC_OPS)].set(jnp.arange(len(MISC_OPS)))


def execute_misc_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch misc instructions on the low byte."""
    return jax.lax.switch(
        MISC_INDEX[instruction.nn],
        [
            execute_get_delay_timer,
            execute_wait_for_key,
            execute_set_delay_timer,
            execute_set_sound_timer,
            execute_add_to_index,
            execute_font_character,
            execute_bcd_conversion,
            execute_store_registers,
            execute_load_registers,
        ],
        state, instruction
    )
