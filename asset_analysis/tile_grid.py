"""Detect regular tile grids in sprite and tile sheets.

A tilesheet changes colour sharply along its grid lines and comparatively
little inside each cell.  Every tile size that divides the image is tried as a
grid hypothesis and scored by how much larger the pixel jumps across its grid
lines are than the jumps between interior rows.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from asset_analysis.buffer import RawImageBuffer
from asset_analysis.config import AnalysisConfig, DEFAULT_CONFIG

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TileDetectionResult:
    """A grid hypothesis: equal cells of tile_width x tile_height."""
    tile_width: int
    tile_height: int
    columns: int
    rows: int
    score: float

    @property
    def tile_count(self) -> int:
        return self.columns * self.rows

    def to_dict(self) -> dict:
        return {
            "tile_width": int(self.tile_width),
            "tile_height": int(self.tile_height),
            "columns": int(self.columns),
            "rows": int(self.rows),
            "score": float(self.score),
        }


def round_score(value: float, digits: int = 3) -> float:
    """Round half up, the way scores are reported to the catalog."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


# ---------------------------------------------------------------------------
# Candidate tile sizes
# ---------------------------------------------------------------------------

def candidate_tile_sizes(width: int, height: int,
                         config: AnalysisConfig = DEFAULT_CONFIG) -> List[int]:
    """Tile edges that divide both dimensions, standard sizes first."""
    shortest = min(width, height)
    candidates = {}

    for size in config.standard_tile_sizes:
        if config.min_tile_size <= size <= shortest / 2:
            if width % size == 0 and height % size == 0:
                candidates[size] = None

    for size in range(config.min_tile_size, shortest // 2 + 1):
        if width % size == 0 and height % size == 0:
            candidates[size] = None

    return list(candidates)


# ---------------------------------------------------------------------------
# Boundary discontinuity score
# ---------------------------------------------------------------------------

def _row_diffs(rgb: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Mean absolute RGB difference between rows y-1 and y."""
    return np.abs(rgb[ys - 1] - rgb[ys]).sum(axis=-1) / 3.0


def score_tile_grid(
    raw: RawImageBuffer,
    tile_width: int,
    tile_height: int,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> float:
    """Score how strongly the image looks like a grid of the given cell size.

    Returns:
        0.0 (no grid evidence) to 1.0 (pixel jumps concentrated on grid lines).
    """
    if raw.is_empty or tile_width <= 0 or tile_height <= 0:
        return 0.0

    h, w = raw.height, raw.width
    rgb = raw.pixels[:, :, :3].astype(np.int16)

    boundary_diff = 0.0
    boundary_count = 0

    # horizontal grid lines
    ys = np.arange(tile_height, h, tile_height)
    if len(ys):
        diffs = _row_diffs(rgb, ys)
        boundary_diff += float(diffs.sum())
        boundary_count += diffs.size

    # vertical grid lines
    xs = np.arange(tile_width, w, tile_width)
    if len(xs):
        diffs = np.abs(rgb[:, xs - 1] - rgb[:, xs]).sum(axis=-1) / 3.0
        boundary_diff += float(diffs.sum())
        boundary_count += diffs.size

    # interior rows, away from the horizontal grid lines
    step = max(1, tile_height // config.interior_sample_divisor)
    margin = config.boundary_margin
    inner_rows = [
        y for y in range(step, h - 1, step)
        if margin <= y % tile_height <= tile_height - margin
    ]
    inner_diff = 0.0
    inner_count = 0
    if inner_rows:
        diffs = _row_diffs(rgb, np.asarray(inner_rows))
        inner_diff = float(diffs.sum())
        inner_count = diffs.size

    if boundary_count == 0 or inner_count == 0:
        return 0.0

    avg_boundary = boundary_diff / boundary_count
    avg_inner = inner_diff / inner_count

    # flat cells make the ratio meaningless; the boundaries alone must stand out
    if avg_inner < config.flat_interior_threshold:
        if avg_boundary > config.boundary_significance:
            return config.flat_interior_score
        return 0.0

    ratio = avg_boundary / avg_inner
    if ratio < config.ratio_floor:
        return 0.0
    if ratio >= config.ratio_ceiling:
        return 1.0
    return (ratio - config.ratio_floor) / (config.ratio_ceiling - config.ratio_floor)


# ---------------------------------------------------------------------------
# Grid search
# ---------------------------------------------------------------------------

def _grid_shape(width: int, height: int, tw: int, th: int) -> Optional[tuple]:
    columns = width // tw
    rows = height // th
    if columns < 2 or rows < 2:
        return None
    if columns * rows <= 4:
        return None
    return columns, rows


def detect_tile_grid(
    raw: RawImageBuffer,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> Optional[TileDetectionResult]:
    """Find the best-scoring tile grid, or None if nothing reaches the threshold.

    Square cells are tried first, then every non-square pairing of the
    candidate sizes (e.g. 16x24 character tiles).  On equal scores the first
    hypothesis tried is kept.
    """
    if raw.is_empty:
        return None

    width, height = raw.width, raw.height
    candidates = candidate_tile_sizes(width, height, config)
    if not candidates:
        return None

    pairs = [(size, size) for size in candidates]
    pairs += [
        (tw, th)
        for tw in candidates
        for th in candidates
        if tw != th and width % tw == 0 and height % th == 0
    ]

    best: Optional[TileDetectionResult] = None
    best_score = 0.0

    for tw, th in pairs:
        shape = _grid_shape(width, height, tw, th)
        if shape is None:
            continue
        columns, rows = shape

        score = score_tile_grid(raw, tw, th, config)
        if config.is_standard_size(tw) and config.is_standard_size(th):
            score *= config.standard_size_bonus
        score = min(score, 1.0)
        logger.debug("Tile %dx%d (%dx%d cells): score %.3f",
                     tw, th, columns, rows, score)

        if score > best_score and score >= config.tile_score_threshold:
            best_score = score
            best = TileDetectionResult(
                tile_width=tw,
                tile_height=th,
                columns=columns,
                rows=rows,
                score=round_score(score),
            )

    if best is not None:
        logger.debug("Detected %dx%d grid of %dx%d tiles (score %.3f)",
                     best.columns, best.rows, best.tile_width,
                     best.tile_height, best.score)
    return best
