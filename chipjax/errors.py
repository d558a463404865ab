"""Exceptions raised at the Python boundary of the emulator."""

from chipjax.constants import (
    FAULT_NONE, FAULT_UNDEFINED_OPCODE, FAULT_STACK_OVERFLOW, FAULT_STACK_UNDERFLOW
)


class Chip8Fault(Exception):
    """Fatal machine fault. Carries the offending opcode and program counter."""

    description = "Machine fault"

    def __init__(self, opcode: int, pc: int):
        self.opcode = opcode
        self.pc = pc
        super().__init__(f"{self.description}: opcode 0x{opcode:04X} at PC 0x{pc:03X}")


class UndefinedOpcode(Chip8Fault):
    description = "Undefined opcode"


class StackOverflow(Chip8Fault):
    description = "Stack overflow"


class StackUnderflow(Chip8Fault):
    description = "Stack underflow"


class RomTooLarge(ValueError):
    """ROM image does not fit between the program start and the end of memory."""

    def __init__(self, size: int, capacity: int):
        self.size = size
        self.capacity = capacity
        super().__init__(f"ROM is {size} bytes but only {capacity} bytes fit in memory")


FAULT_TYPES = {
    FAULT_UNDEFINED_OPCODE: UndefinedOpcode,
    FAULT_STACK_OVERFLOW: StackOverflow,
    FAULT_STACK_UNDERFLOW: StackUnderflow,
}


def fault_from_state(state) -> Chip8Fault | None:
    """Build the exception matching the state's fault code, if any."""
    code = int(state.fault)
    if code == FAULT_NONE:
        return None
    return FAULT_TYPES[code](int(state.fault_opcode), int(state.fault_pc))


def raise_for_fault(state):
    """Raise the state's fault as an exception, or return the state unchanged."""
    fault = fault_from_state(state)
    if fault is not None:
        raise fault
    return state
