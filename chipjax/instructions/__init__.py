"""CHIP-8 instruction families, one module per opcode group."""
