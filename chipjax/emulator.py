"""Main CHIP-8 emulator execution engine."""

from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
from chipjax.state import EmulatorState
from chipjax.decode import decode, is_defined
from chipjax.errors import RomTooLarge, raise_for_fault
from chipjax.constants import PROGRAM_START, MAX_ROM_SIZE, ADDRESS_MASK
from chipjax.instructions.system import execute_system_instruction, undefined_opcode
from chipjax.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset, execute_skip_if_key
)
from chipjax.instructions.alu import execute_alu_operation
from chipjax.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipjax.instructions.display import execute_display
from chipjax.instructions.misc import execute_misc_instruction


def _dispatch(state: EmulatorState, decoded_instruction) -> EmulatorState:
    return jax.lax.switch(
        decoded_instruction.opcode,
        [
            execute_system_instruction,
            execute_jump,
            execute_call,
            execute_skip_if_equal_immediate,
            execute_skip_if_not_equal_immediate,
            execute_skip_if_equal_register,
            execute_set,
            execute_add,
            execute_alu_operation,
            execute_skip_if_not_equal_register,
            execute_set_index,
            execute_jump_with_offset,
            execute_random,
            execute_display,
            execute_skip_if_key,
            execute_misc_instruction,
        ],
        state, decoded_instruction
    )


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    The state is expected to come from ``fetch``, so the program counter
    already points past the instruction. Undefined opcodes and stack faults
    set ``state.fault`` and leave the rest of the state unchanged.
    """
    decoded_instruction = decode(instruction)
    return jax.lax.cond(
        is_defined(instruction),
        _dispatch,
        undefined_opcode,
        state, decoded_instruction
    )


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory."""
    instruction = _pack_u16(state.memory[state.pc & ADDRESS_MASK], state.memory[(state.pc + 1) & ADDRESS_MASK])
    return state.replace(pc=jnp.astype(state.pc + 2, jnp.uint16)), instruction


def step(state: EmulatorState) -> EmulatorState:
    """Run one emulated cycle: fetch, decode and execute.

    A faulted state is returned unchanged. When the instruction faults, the
    returned state is the one before the instruction, with the fault code,
    opcode and program counter recorded.
    """
    fetched, instruction = fetch(state)
    executed = execute(fetched, instruction)

    def _record_fault(_):
        return state.replace(
            fault=executed.fault,
            fault_opcode=jnp.astype(instruction, jnp.uint16),
            fault_pc=state.pc,
        )

    def _commit(_):
        return jax.lax.cond(executed.is_faulted, _record_fault, lambda _: executed, None)

    return jax.lax.cond(state.is_faulted, lambda _: state, _commit, None)


_jit_step = jax.jit(step)


def tick(state: EmulatorState) -> EmulatorState:
    """Run one cycle and raise the matching ``Chip8Fault`` if it faulted."""
    return raise_for_fault(_jit_step(state))


def run_instruction(state, _):
    state = step(state)
    return state, state.fault


@partial(jax.jit, static_argnums=1)
def run_n_steps(state: EmulatorState, n: int) -> EmulatorState:
    """Run ``n`` cycles under ``lax.scan``. Execution freezes on the first fault."""
    state, _ = jax.lax.scan(run_instruction, state, length=n)
    return state


def decrement_timers(state: EmulatorState) -> EmulatorState:
    """Count both timers down by one, stopping at zero. Called by the driver at 60 Hz."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def load_rom_bytes(state: EmulatorState, rom_data: bytes) -> EmulatorState:
    """Copy a ROM image into memory starting at 0x200.

    Raises:
        RomTooLarge: if the image extends past the end of memory. Memory is
            left untouched in that case.
    """
    if len(rom_data) > MAX_ROM_SIZE:
        raise RomTooLarge(len(rom_data), MAX_ROM_SIZE)
    if len(rom_data) == 0:
        return state
    rom_array = jnp.array(list(rom_data), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom_data)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM file into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_rom_bytes(state, rom_data)
