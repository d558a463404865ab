"""CHIP-8 instruction decoding."""

import jax.numpy as jnp
from chex import dataclass


# Secondary fields of the overloaded primary tags
SYSTEM_OPS = (0xE0, 0xEE)
ALU_OPS = (0x0, 0x1, 0x2, 0x3, 0x4, 0x5, 0x6, 0x7, 0xE)
KEY_OPS = (0x9E, 0xA1)
MISC_OPS = (0x07, 0x0A, 0x15, 0x18, 0x1E, 0x29, 0x33, 0x55, 0x65)


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    return DecodedInstruction(
        raw=instruction,
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


def _any_equal(value, candidates) -> jnp.ndarray:
    return jnp.any(jnp.asarray(value) == jnp.array(candidates))


def is_defined(instruction: int) -> jnp.ndarray:
    """Whether the instruction belongs to the CHIP-8 opcode table.

    Works on Python ints and on traced values, so it can guard the
    dispatch inside ``jax.jit``.
    """
    decoded = decode(instruction)
    defined_by_tag = jnp.array([
        _any_equal(decoded.nn, SYSTEM_OPS) & (decoded.x == 0),
        True, True, True, True,
        decoded.n == 0,
        True, True,
        _any_equal(decoded.n, ALU_OPS),
        decoded.n == 0,
        True, True, True, True,
        _any_equal(decoded.nn, KEY_OPS),
        _any_equal(decoded.nn, MISC_OPS),
    ])
    return defined_by_tag[decoded.opcode]


def mnemonic(instruction: int) -> str:
    """Human-readable assembly for a single instruction, used in debug logs."""
    d = decode(int(instruction))
    vx, vy = f"V{d.x:X}", f"V{d.y:X}"
    addr, byte = f"0x{d.nnn:03X}", f"0x{d.nn:02X}"

    if d.opcode == 0x0:
        text = {0x00E0: "CLS", 0x00EE: "RET"}.get(d.raw)
    elif d.opcode == 0x5:
        text = f"SE {vx}, {vy}" if d.n == 0 else None
    elif d.opcode == 0x8:
        text = {
            0x0: f"LD {vx}, {vy}",
            0x1: f"OR {vx}, {vy}",
            0x2: f"AND {vx}, {vy}",
            0x3: f"XOR {vx}, {vy}",
            0x4: f"ADD {vx}, {vy}",
            0x5: f"SUB {vx}, {vy}",
            0x6: f"SHR {vx}",
            0x7: f"SUBN {vx}, {vy}",
            0xE: f"SHL {vx}",
        }.get(d.n)
    elif d.opcode == 0x9:
        text = f"SNE {vx}, {vy}" if d.n == 0 else None
    elif d.opcode == 0xE:
        text = {0x9E: f"SKP {vx}", 0xA1: f"SKNP {vx}"}.get(d.nn)
    elif d.opcode == 0xF:
        text = {
            0x07: f"LD {vx}, DT",
            0x0A: f"LD {vx}, K",
            0x15: f"LD DT, {vx}",
            0x18: f"LD ST, {vx}",
            0x1E: f"ADD I, {vx}",
            0x29: f"LD F, {vx}",
            0x33: f"LD B, {vx}",
            0x55: f"LD [I], {vx}",
            0x65: f"LD {vx}, [I]",
        }.get(d.nn)
    else:
        text = {
            0x1: f"JP {addr}",
            0x2: f"CALL {addr}",
            0x3: f"SE {vx}, {byte}",
            0x4: f"SNE {vx}, {byte}",
            0x6: f"LD {vx}, {byte}",
            0x7: f"ADD {vx}, {byte}",
            0xA: f"LD I, {addr}",
            0xB: f"JP V0, {addr}",
            0xC: f"RND {vx}, {byte}",
            0xD: f"DRW {vx}, {vy}, {d.n}",
        }[d.opcode]

    return text if text is not None else f"??? 0x{d.raw:04X}"
