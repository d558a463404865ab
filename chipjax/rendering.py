"""Framebuffer rendering helpers shared by the interactive and headless runners."""

from typing import Tuple

import jax.numpy as jnp
import numpy as np
from PIL import Image

from chipjax.constants import SCREEN_WIDTH, SCREEN_HEIGHT

Color = Tuple[int, int, int]

COLOR_SCHEMES = {
    "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
    "amber": ((255, 176, 0), (0, 0, 0)),
    "white": ((255, 255, 255), (0, 0, 0)),
    "blue": ((0, 255, 255), (0, 0, 64)),
    "retro": ((255, 255, 0), (64, 0, 64)),
}


def create_color_scheme(scheme: str = "classic") -> Tuple[Color, Color]:
    """Look up a named ``(on_color, off_color)`` pair.

    Raises:
        ValueError: if the scheme is unknown
    """
    if scheme not in COLOR_SCHEMES:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(COLOR_SCHEMES.keys())}"
        )
    return COLOR_SCHEMES[scheme]


def chip8_display_to_rgb(
    display: jnp.ndarray,
    scale: int = 8,
    on_color: Color = (0, 255, 0),
    off_color: Color = (0, 0, 0),
) -> np.ndarray:
    """Convert the ``(64, 32)`` boolean framebuffer to an RGB image.

    Args:
        display: Framebuffer indexed as ``display[x, y]``
        scale: Nearest-neighbour upscaling factor
        on_color: RGB color for lit pixels
        off_color: RGB color for dark pixels

    Returns:
        uint8 array of shape ``(32 * scale, 64 * scale, 3)``
    """
    pixels = np.asarray(display, dtype=np.bool_)
    if pixels.shape != (SCREEN_WIDTH, SCREEN_HEIGHT):
        raise ValueError(f"Expected display shape {(SCREEN_WIDTH, SCREEN_HEIGHT)}, got {pixels.shape}")

    # (width, height) -> row-major image (height, width)
    pixels = pixels.T
    rgb_frame = np.empty((*pixels.shape, 3), dtype=np.uint8)
    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def save_screenshot(display: jnp.ndarray, filename: str, scale: int = 8, color_scheme: str = "classic") -> None:
    """Write the framebuffer to an image file (format from the extension)."""
    on_color, off_color = create_color_scheme(color_scheme)
    frame = chip8_display_to_rgb(display, scale, on_color, off_color)
    Image.fromarray(frame).save(filename)
