"""Tests for display operations (DXYN)."""

import jax.numpy as jnp
import pytest
from chipjax import execute
from conftest import setup_sprite_in_memory


def draw(state, x, y, address, height):
    """Point V0/V1 at (x, y), I at address, and draw ``height`` rows."""
    state = execute(state, 0x6000 | x)
    state = execute(state, 0x6100 | y)
    state = execute(state, 0xA000 | address)
    return execute(state, 0xD010 | height)


class TestBasicSprites:
    """Test basic sprite drawing."""

    def test_basic_sprite_draw(self, fresh_state):
        """Test basic sprite drawing without collision."""
        sprite = [0xC0, 0xC0]  # 2x2 box
        state = setup_sprite_in_memory(fresh_state, 0x300, sprite)

        state = draw(state, 10, 5, 0x300, 2)

        assert state.display[10, 5]
        assert state.display[11, 5]
        assert state.display[10, 6]
        assert state.display[11, 6]
        assert not state.display[12, 5]
        assert jnp.sum(state.display) == 4
        assert state.V[15] == 0

    def test_collision_detection(self, fresh_state):
        """Drawing the same pixel twice clears it and reports a collision."""
        state = setup_sprite_in_memory(fresh_state, 0x400, [0x80])

        state = draw(state, 20, 10, 0x400, 1)
        assert state.display[20, 10]
        assert state.V[15] == 0

        state = execute(state, 0xD011)
        assert not state.display[20, 10]
        assert state.V[15] == 1

    def test_xor_behavior(self, fresh_state):
        """Test XOR behavior - drawing twice should erase."""
        state = setup_sprite_in_memory(fresh_state, 0x500, [0xF0])

        state = draw(state, 8, 15, 0x500, 1)
        assert all(bool(state.display[x, 15]) for x in range(8, 12))
        assert state.V[15] == 0

        state = execute(state, 0xD011)
        assert not any(bool(state.display[x, 15]) for x in range(8, 12))
        assert state.V[15] == 1

    def test_partial_overlap_sets_collision(self, fresh_state):
        """One shared pixel is enough for VF = 1; new pixels still light up."""
        state = setup_sprite_in_memory(fresh_state, 0x500, [0xC0])
        state = draw(state, 0, 0, 0x500, 1)  # pixels 0,1

        state = execute(state, 0x6001)  # V0 = 1
        state = execute(state, 0xD011)  # pixels 1,2

        assert state.display[0, 0]
        assert not state.display[1, 0]
        assert state.display[2, 0]
        assert state.V[15] == 1

    def test_zero_height_draws_nothing(self, fresh_state):
        state = setup_sprite_in_memory(fresh_state, 0x300, [0xFF])
        state = draw(state, 0, 0, 0x300, 0)
        assert jnp.sum(state.display) == 0
        assert state.V[15] == 0


class TestScreenWrapping:
    """Test sprite wraparound at the screen edges."""

    def test_right_edge_wraps(self, fresh_state):
        """A sprite at x=60 continues at x=0 on the same row."""
        state = setup_sprite_in_memory(fresh_state, 0x600, [0xFF])

        state = draw(state, 60, 0, 0x600, 1)

        for x in (60, 61, 62, 63, 0, 1, 2, 3):
            assert state.display[x, 0], f"pixel {x} not drawn"
        assert not state.display[4, 0]

    def test_bottom_edge_wraps(self, fresh_state):
        """Rows past the bottom continue at the top."""
        state = setup_sprite_in_memory(fresh_state, 0x700, [0x80, 0x80, 0x80])

        state = draw(state, 0, 30, 0x700, 3)

        assert state.display[0, 30]
        assert state.display[0, 31]
        assert state.display[0, 0]

    def test_coordinate_wrapping(self, fresh_state):
        """Start coordinates are taken modulo the screen size."""
        state = setup_sprite_in_memory(fresh_state, 0x800, [0x80])

        state = draw(state, 70, 37, 0x800, 1)

        assert state.display[6, 5]


class TestSpriteVariations:
    """Test different sprite configurations."""

    def test_different_sprite_heights(self, fresh_state):
        """Only N rows are drawn."""
        sprite = [0x80, 0x40, 0x20, 0x10, 0x08]  # Diagonal line
        state = setup_sprite_in_memory(fresh_state, 0x900, sprite)

        state = draw(state, 10, 8, 0x900, 3)

        assert state.display[10, 8]
        assert state.display[11, 9]
        assert state.display[12, 10]
        assert not state.display[13, 11]

    def test_vf_register_preservation(self, fresh_state):
        """VF is cleared when no pixel is erased."""
        state = setup_sprite_in_memory(fresh_state, 0xB00, [0x80])
        state = execute(state, 0x6F01)  # VF = 1

        state = draw(state, 5, 5, 0xB00, 1)

        assert state.V[15] == 0

    @pytest.mark.parametrize("digit", [0x0, 0x8, 0xF])
    def test_font_glyph(self, fresh_state, digit):
        """FX29 + DXY5 draws the built-in glyph."""
        state = execute(fresh_state, 0x6200 | digit)
        state = execute(state, 0xF229)
        state = execute(state, 0x6000)
        state = execute(state, 0x6100)
        state = execute(state, 0xD015)

        rows = fresh_state.memory[0x50 + digit * 5:0x50 + digit * 5 + 5]
        for y, row in enumerate(rows):
            for x in range(8):
                assert bool(state.display[x, y]) == bool((int(row) >> (7 - x)) & 1)
