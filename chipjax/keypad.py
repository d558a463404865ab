"""Hexadecimal keypad model driven by the host."""

import jax.numpy as jnp
from chipjax.state import EmulatorState
from chipjax.constants import NUM_KEYS


def _check_key(key: int):
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Key must be in 0-{NUM_KEYS - 1}, got {key}")


def press_key(state: EmulatorState, key: int) -> EmulatorState:
    """Mark ``key`` as held and latch it as the most recent press for FX0A."""
    _check_key(key)
    return state.replace(
        keypad=state.keypad.at[key].set(True),
        last_key=jnp.astype(key, jnp.int8),
    )


def release_key(state: EmulatorState, key: int) -> EmulatorState:
    """Mark ``key`` as released."""
    _check_key(key)
    return state.replace(keypad=state.keypad.at[key].set(False))


def set_keypad(state: EmulatorState, pressed) -> EmulatorState:
    """Replace the held state of all 16 keys without latching a press."""
    keypad = jnp.asarray(pressed, dtype=jnp.bool_)
    if keypad.shape != (NUM_KEYS,):
        raise ValueError(f"Expected {NUM_KEYS} key states, got shape {keypad.shape}")
    return state.replace(keypad=keypad)


def is_waiting_for_key(state: EmulatorState) -> bool:
    """Whether the machine is stalled on FX0A with no key latched yet."""
    return bool(state.awaiting_key) and int(state.last_key) < 0
