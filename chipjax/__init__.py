"""CHIP-8 emulator package."""

from chipjax.state import EmulatorState, StackState, create_state
from chipjax.emulator import (
    execute, fetch, step, tick, run_n_steps, decrement_timers, load_rom, load_rom_bytes
)
from chipjax.decode import DecodedInstruction, decode, is_defined, mnemonic
from chipjax.errors import (
    Chip8Fault, UndefinedOpcode, StackOverflow, StackUnderflow, RomTooLarge, raise_for_fault
)
from chipjax.keypad import press_key, release_key, set_keypad, is_waiting_for_key
from chipjax.constants import *

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "tick",
    "run_n_steps",
    "decrement_timers",
    "load_rom",
    "load_rom_bytes",
    "DecodedInstruction",
    "decode",
    "is_defined",
    "mnemonic",
    "Chip8Fault",
    "UndefinedOpcode",
    "StackOverflow",
    "StackUnderflow",
    "RomTooLarge",
    "raise_for_fault",
    "press_key",
    "release_key",
    "set_keypad",
    "is_waiting_for_key",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "STACK_SIZE",
    "MAX_ROM_SIZE",
]
