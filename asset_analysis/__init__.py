"""Public interface for game asset preview analysis."""

from __future__ import annotations

from .analyzer import ImageAnalysisResult, analyze_batch, analyze_file, analyze_image
from .animation import AnimationDetectionResult, detect_animation_frames
from .buffer import AnalysisError, ImageBufferError, ImageLoadError, RawImageBuffer
from .categorizer import CategorizationInput, CategorizationResult, categorize
from .colors import detect_transparency, extract_dominant_colors
from .config import (
    DEFAULT_CONFIG,
    AnalysisConfig,
    AnimationOrientation,
    AssetCategory,
)
from .tile_grid import TileDetectionResult, detect_tile_grid, score_tile_grid

__all__ = [
    "AnalysisConfig",
    "AnalysisError",
    "AnimationDetectionResult",
    "AnimationOrientation",
    "AssetCategory",
    "CategorizationInput",
    "CategorizationResult",
    "DEFAULT_CONFIG",
    "ImageAnalysisResult",
    "ImageBufferError",
    "ImageLoadError",
    "RawImageBuffer",
    "TileDetectionResult",
    "analyze_batch",
    "analyze_file",
    "analyze_image",
    "categorize",
    "detect_animation_frames",
    "detect_tile_grid",
    "detect_transparency",
    "extract_dominant_colors",
    "score_tile_grid",
]
