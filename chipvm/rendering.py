"""Conversions from the packed display to host pixel formats."""

import jax.numpy as jnp
import numpy as np
from typing import Tuple

from chipvm.constants import SCREEN_WIDTH, SCREEN_HEIGHT


def unpack_vram(vram: jnp.ndarray) -> np.ndarray:
    """Unpack the 256-byte display into a (32, 64) boolean array, row-major."""
    packed = np.asarray(vram, dtype=np.uint8)
    return np.unpackbits(packed).reshape(SCREEN_HEIGHT, SCREEN_WIDTH).astype(np.bool_)


def vram_to_rgb(
    vram: jnp.ndarray,
    on_color: Tuple[int, int, int] = (0, 255, 0),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert the packed display to an RGB array.

    Args:
        vram: Packed display bytes (256 values, 8 pixels per byte, MSB first)
        on_color: RGB color for "on" pixels (default: green)
        off_color: RGB color for "off" pixels (default: black)

    Returns:
        RGB array of shape (32, 64, 3) with uint8 values
    """
    pixels = unpack_vram(vram)

    rgb_frame = np.zeros((SCREEN_HEIGHT, SCREEN_WIDTH, 3), dtype=np.uint8)
    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    return rgb_frame


def vram_to_text(vram: jnp.ndarray, on: str = "#", off: str = ".") -> str:
    """Render the packed display as 32 lines of text."""
    return "\n".join(
        "".join(on if pixel else off for pixel in row) for row in unpack_vram(vram)
    )


def create_color_scheme(
    scheme: str = "classic",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes for rendering.

    Args:
        scheme: Color scheme name ("classic", "amber", "white", "blue", "retro")

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    schemes = {
        "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
        "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
        "white": ((255, 255, 255), (0, 0, 0)),  # White on black
        "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
        "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
    }

    if scheme not in schemes:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(schemes.keys())}"
        )

    return schemes[scheme]
