"""CHIP-8 display operations."""

import jax.numpy as jnp
from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction
from chipjax.constants import SCREEN_WIDTH, SCREEN_HEIGHT, ADDRESS_MASK, FLAG_REGISTER

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    Rows are read from memory starting at I. Sprites that cross an edge of
    the screen wrap to the opposite edge. VF is set when any lit pixel is
    switched off.
    """
    sprite_x = jnp.astype(state.V[instruction.x], jnp.int32) % SCREEN_WIDTH
    sprite_y = jnp.astype(state.V[instruction.y], jnp.int32) % SCREEN_HEIGHT

    col_offset = (xx - sprite_x) % SCREEN_WIDTH
    row_offset = (yy - sprite_y) % SCREEN_HEIGHT
    in_sprite = (col_offset < 8) & (row_offset < instruction.n)

    sprite_bytes = state.memory[(jnp.astype(state.I, jnp.int32) + row_offset) & ADDRESS_MASK]
    sprite = (((sprite_bytes >> (7 - jnp.minimum(col_offset, 7))) & 1) == 1) & in_sprite

    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(jnp.any(state.display & sprite), jnp.uint8))
    )
