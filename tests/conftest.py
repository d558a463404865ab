"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from chipjax import create_state, load_rom_bytes


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Helper to assign registers by name, e.g. ``set_registers(s, V0=1, VF=0)``."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)


def load_program(state, *instructions):
    """Helper to assemble 16-bit opcodes into memory at 0x200."""
    rom = b"".join(instruction.to_bytes(2, "big") for instruction in instructions)
    return load_rom_bytes(state, rom)
