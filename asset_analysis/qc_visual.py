"""Visual QC: draw a detected tile grid over its source image."""

import logging
from pathlib import Path
from typing import Optional, Tuple

import cv2
import numpy as np
from PIL import Image

from asset_analysis.buffer import RawImageBuffer
from asset_analysis.tile_grid import TileDetectionResult

logger = logging.getLogger(__name__)

# Grid line colour (red)
GRID_COLOR = (255, 0, 0)

# Background shown through transparent pixels
CHECK_BACKGROUND = 220.0


def _composite_rgb(raw: RawImageBuffer) -> np.ndarray:
    pixels = raw.pixels
    if raw.channels == 4:
        alpha = pixels[:, :, 3:4].astype(np.float32) / 255.0
        rgb = pixels[:, :, :3].astype(np.float32)
        bg = np.full_like(rgb, CHECK_BACKGROUND)
        return (rgb * alpha + bg * (1 - alpha)).astype(np.uint8)
    return pixels[:, :, :3].copy()


def render_grid_overlay(
    raw: RawImageBuffer,
    tile_grid: Optional[TileDetectionResult],
    grid_color: Tuple[int, int, int] = GRID_COLOR,
) -> np.ndarray:
    """Return an RGB copy of the image with the grid lines drawn on it.

    Lines sit on the first pixel of each cell.  Without a grid the
    composited image is returned unchanged.
    """
    overlay = _composite_rgb(raw)
    if tile_grid is None or raw.is_empty:
        return overlay

    h, w = overlay.shape[:2]
    for x in range(tile_grid.tile_width, w, tile_grid.tile_width):
        cv2.line(overlay, (x, 0), (x, h - 1), grid_color, 1)
    for y in range(tile_grid.tile_height, h, tile_grid.tile_height):
        cv2.line(overlay, (0, y), (w - 1, y), grid_color, 1)
    return overlay


def save_grid_overlay(
    raw: RawImageBuffer,
    tile_grid: Optional[TileDetectionResult],
    output_path: Path,
) -> Path:
    """Render the grid overlay and save it as an image.

    Returns the output path.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(render_grid_overlay(raw, tile_grid)).save(output_path)
    logger.info("Grid overlay saved: %s", output_path)
    return output_path
