"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, field, PyTreeNode

from chipjax.constants import (
    PROGRAM_START, FONT_START, FONT_DATA, MEMORY_SIZE, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS, NUM_KEYS, NO_KEY, FAULT_NONE
)


def _scalar(value, dtype):
    return field(default_factory=lambda: jnp.asarray(value, dtype=dtype))


def _zeros(shape, dtype):
    return field(default_factory=lambda: jnp.zeros(shape, dtype=dtype))


@dataclass(frozen=True)
class StackState:
    """Return-address stack for subroutine calls."""
    data: jnp.ndarray = _zeros(STACK_SIZE, jnp.uint16)
    pointer: jnp.ndarray = _scalar(0, jnp.uint8)


class EmulatorState(PyTreeNode):
    """Main CHIP-8 machine state.

    Attributes:
        rng: PRNG key feeding the CXNN random byte generator
        memory: 4096 bytes of addressable memory
        pc: Program counter
        display: Monochrome framebuffer indexed as ``display[x, y]``
        stack: Return-address stack
        delay_timer: 60 Hz delay timer, decremented by the driver
        sound_timer: 60 Hz sound timer, decremented by the driver
        keypad: Pressed state of the 16 hexadecimal keys
        last_key: Key pressed since the last FX0A check, or -1
        awaiting_key: Set while an FX0A instruction waits for a key press
        V: General purpose registers V0-VF
        I: Index register
        fault: Fault code, ``FAULT_NONE`` while the machine is healthy
        fault_opcode: Opcode that raised the fault
        fault_pc: Program counter of the faulting instruction
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = _zeros(MEMORY_SIZE, jnp.uint8)
    pc: jnp.ndarray = _scalar(PROGRAM_START, jnp.uint16)
    display: jnp.ndarray = _zeros((SCREEN_WIDTH, SCREEN_HEIGHT), jnp.bool_)
    stack: StackState = field(default_factory=StackState)
    delay_timer: jnp.ndarray = _scalar(0, jnp.uint8)
    sound_timer: jnp.ndarray = _scalar(0, jnp.uint8)
    keypad: jnp.ndarray = _zeros(NUM_KEYS, jnp.bool_)
    last_key: jnp.ndarray = _scalar(NO_KEY, jnp.int8)
    awaiting_key: jnp.ndarray = _scalar(False, jnp.bool_)
    V: jnp.ndarray = _zeros(NUM_REGISTERS, jnp.uint8)
    I: jnp.ndarray = _scalar(0, jnp.uint16)
    fault: jnp.ndarray = _scalar(FAULT_NONE, jnp.uint8)
    fault_opcode: jnp.ndarray = _scalar(0, jnp.uint16)
    fault_pc: jnp.ndarray = _scalar(0, jnp.uint16)

    @property
    def is_faulted(self) -> jnp.ndarray:
        """Boolean scalar, true once the machine has stopped on a fault.

        Safe to use under ``jax.jit``; wrap in ``bool()`` for Python control flow.
        """
        return self.fault != FAULT_NONE


def create_state(rng: jax.random.PRNGKey = jax.random.PRNGKey(0)) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    state = EmulatorState(rng)
    font = jnp.array(FONT_DATA, dtype=jnp.uint8)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(font))
