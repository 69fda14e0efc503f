"""Tell animation strips apart from tilesheets on a detected grid.

Consecutive frames of a sprite animation differ only by small pose changes
and sit on a transparent background, so their average colours stay close.
Tiles in a tilesheet are visually distinct and usually opaque.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from asset_analysis.buffer import ImageBufferError, RawImageBuffer
from asset_analysis.config import AnalysisConfig, AnimationOrientation, DEFAULT_CONFIG
from asset_analysis.tile_grid import TileDetectionResult, round_score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnimationDetectionResult:
    """Frame layout and strip verdict for a gridded image."""
    is_animation_strip: bool
    frame_width: int
    frame_height: int
    frame_count: int
    columns: int
    rows: int
    orientation: AnimationOrientation
    frame_similarity: float     # 0-1, 1 = consecutive frames identical on average
    confidence: float

    def to_dict(self) -> dict:
        return {
            "is_animation_strip": bool(self.is_animation_strip),
            "frame_width": int(self.frame_width),
            "frame_height": int(self.frame_height),
            "frame_count": int(self.frame_count),
            "columns": int(self.columns),
            "rows": int(self.rows),
            "orientation": self.orientation.value,
            "frame_similarity": float(self.frame_similarity),
            "confidence": float(self.confidence),
        }


def _orientation(columns: int, rows: int) -> AnimationOrientation:
    if rows == 1:
        return AnimationOrientation.HORIZONTAL
    if columns == 1:
        return AnimationOrientation.VERTICAL
    return AnimationOrientation.GRID


def frame_averages(raw: RawImageBuffer, tile_grid: TileDetectionResult) -> np.ndarray:
    """Mean R, G, B, A of every grid cell in row-major order.

    Returns:
        (columns * rows, 4) float array. Alpha is 255 without an alpha channel.
    """
    tw, th = tile_grid.tile_width, tile_grid.tile_height
    columns, rows = tile_grid.columns, tile_grid.rows
    if tw <= 0 or th <= 0 or columns * tw > raw.width or rows * th > raw.height:
        raise ImageBufferError(
            f"Grid of {columns}x{rows} tiles at {tw}x{th} does not fit "
            f"a {raw.width}x{raw.height} image"
        )

    region = raw.pixels[:rows * th, :columns * tw].astype(np.float64)
    cells = region.reshape(rows, th, columns, tw, raw.channels).mean(axis=(1, 3))
    cells = cells.reshape(rows * columns, raw.channels)

    if raw.channels < 4:
        alpha = np.full((len(cells), 1), 255.0)
        cells = np.hstack([cells[:, :3], alpha])
    return cells


def detect_animation_frames(
    raw: RawImageBuffer,
    tile_grid: Optional[TileDetectionResult],
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> Optional[AnimationDetectionResult]:
    """Decide whether the cells of a grid are frames of one animation.

    Args:
        raw: Decoded image the grid was detected on.
        tile_grid: Grid hypothesis, usually from detect_tile_grid.
        config: Similarity and confidence settings.

    Returns:
        AnimationDetectionResult, or None without a grid of at least 2 cells.
    """
    if tile_grid is None:
        return None

    frame_count = tile_grid.columns * tile_grid.rows
    if frame_count < 2:
        return None

    averages = frame_averages(raw, tile_grid)

    # per-pair mean channel difference, normalized to 0-1
    deltas = np.abs(np.diff(averages, axis=0)).sum(axis=1) / 4.0
    similarity = float(np.mean(1.0 - deltas / 255.0))

    has_transparency = bool(
        raw.has_alpha and np.any(averages[:, 3] < config.transparent_cell_alpha)
    )
    is_strip = similarity > config.animation_similarity_threshold and has_transparency

    confidence = 0.0
    if is_strip:
        confidence = min(
            config.animation_confidence_base
            + similarity * config.animation_similarity_weight
            + (config.animation_transparency_bonus if has_transparency else 0.0),
            1.0,
        )

    logger.debug("Frames %dx%d: similarity %.3f, transparent=%s, strip=%s",
                 tile_grid.columns, tile_grid.rows, similarity,
                 has_transparency, is_strip)

    return AnimationDetectionResult(
        is_animation_strip=is_strip,
        frame_width=tile_grid.tile_width,
        frame_height=tile_grid.tile_height,
        frame_count=frame_count,
        columns=tile_grid.columns,
        rows=tile_grid.rows,
        orientation=_orientation(tile_grid.columns, tile_grid.rows),
        frame_similarity=round_score(similarity),
        confidence=round_score(confidence),
    )
