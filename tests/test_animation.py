"""Tests for animation strip detection on gridded images."""

from __future__ import annotations

import numpy as np
import pytest

from asset_analysis.animation import detect_animation_frames, frame_averages
from asset_analysis.buffer import ImageBufferError, RawImageBuffer
from asset_analysis.config import AnimationOrientation
from asset_analysis.tile_grid import TileDetectionResult


# ---------------------------------------------------------------------------
# Synthetic image helpers
# ---------------------------------------------------------------------------


def _make_walk_strip(frames: int = 4, size: int = 32) -> np.ndarray:
    """Horizontal strip of near-identical frames on a transparent background.

    Each frame has the same 12x12 body; only a 2x2 "foot" moves.
    """
    img = np.zeros((size, size * frames, 4), dtype=np.uint8)
    for i in range(frames):
        x0 = i * size
        img[10:22, x0 + 10:x0 + 22] = (60, 120, 200, 255)
        foot_x = x0 + 10 + 3 * i
        img[22:24, foot_x:foot_x + 2] = (30, 30, 30, 255)
    return img


def _make_opaque_tiles(grid: int = 4, size: int = 16) -> np.ndarray:
    """Grid of distinct opaque tiles."""
    rng = np.random.RandomState(7)
    img = np.zeros((grid * size, grid * size, 4), dtype=np.uint8)
    for ty in range(grid):
        for tx in range(grid):
            color = rng.randint(0, 256, 3)
            img[ty * size:(ty + 1) * size, tx * size:(tx + 1) * size, :3] = color
    img[:, :, 3] = 255
    return img


def _grid(tw: int, th: int, columns: int, rows: int, score: float = 1.0) -> TileDetectionResult:
    return TileDetectionResult(tile_width=tw, tile_height=th, columns=columns,
                               rows=rows, score=score)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestDetectAnimationFrames:
    def test_no_grid(self):
        raw = RawImageBuffer.from_array(_make_walk_strip())
        assert detect_animation_frames(raw, None) is None

    def test_single_cell_grid(self):
        raw = RawImageBuffer.from_array(_make_walk_strip(frames=1))
        assert detect_animation_frames(raw, _grid(32, 32, 1, 1)) is None

    def test_walk_strip(self):
        raw = RawImageBuffer.from_array(_make_walk_strip())
        result = detect_animation_frames(raw, _grid(32, 32, 4, 1))
        assert result is not None
        assert result.is_animation_strip is True
        assert result.orientation == AnimationOrientation.HORIZONTAL
        assert result.frame_count == 4
        assert (result.frame_width, result.frame_height) == (32, 32)
        assert result.frame_similarity > 0.99
        assert 0.9 < result.confidence <= 1.0

    def test_vertical_strip(self):
        strip = _make_walk_strip()
        frames = [strip[:, i * 32:(i + 1) * 32] for i in range(4)]
        raw = RawImageBuffer.from_array(np.vstack(frames))
        result = detect_animation_frames(raw, _grid(32, 32, 1, 4))
        assert result.orientation == AnimationOrientation.VERTICAL
        assert result.is_animation_strip is True

    def test_opaque_tilesheet_is_not_a_strip(self):
        raw = RawImageBuffer.from_array(_make_opaque_tiles())
        result = detect_animation_frames(raw, _grid(16, 16, 4, 4))
        assert result is not None
        assert result.orientation == AnimationOrientation.GRID
        assert result.frame_count == 16
        assert result.is_animation_strip is False
        assert result.confidence == 0.0

    def test_rgb_frames_count_as_opaque(self):
        img = np.full((32, 128, 3), 90, dtype=np.uint8)
        raw = RawImageBuffer.from_array(img)
        result = detect_animation_frames(raw, _grid(32, 32, 4, 1))
        assert result.frame_similarity == 1.0
        assert result.is_animation_strip is False

    def test_alpha_flag_required(self):
        raw_img = _make_walk_strip()
        raw = RawImageBuffer.from_array(raw_img, has_alpha=False)
        result = detect_animation_frames(raw, _grid(32, 32, 4, 1))
        assert result.is_animation_strip is False

    def test_similarity_formula(self):
        img = np.zeros((16, 32, 4), dtype=np.uint8)
        img[:, :, 3] = 255
        img[:, 16:, :3] = 255
        raw = RawImageBuffer.from_array(img)
        result = detect_animation_frames(raw, _grid(16, 16, 2, 1))
        # (255 * 3 + 0) / 4 / 255 = 0.75 difference
        assert result.frame_similarity == pytest.approx(0.25)

    def test_grid_outside_image(self):
        raw = RawImageBuffer.from_array(_make_walk_strip())
        with pytest.raises(ImageBufferError):
            detect_animation_frames(raw, _grid(32, 32, 5, 1))


class TestFrameAverages:
    def test_row_major_order(self):
        img = np.zeros((16, 16, 3), dtype=np.uint8)
        img[:8, 8:] = 10    # top right
        img[8:, :8] = 20    # bottom left
        raw = RawImageBuffer.from_array(img)
        avgs = frame_averages(raw, _grid(8, 8, 2, 2))
        assert avgs.shape == (4, 4)
        assert list(avgs[:, 0]) == [0.0, 10.0, 20.0, 0.0]
        assert list(avgs[:, 3]) == [255.0] * 4
