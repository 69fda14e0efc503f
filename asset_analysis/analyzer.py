"""Run every detector on an image and merge the signals into one result."""

import json
import logging
import multiprocessing
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

from asset_analysis.animation import AnimationDetectionResult, detect_animation_frames
from asset_analysis.buffer import AnalysisError, RawImageBuffer
from asset_analysis.categorizer import CategorizationInput, categorize
from asset_analysis.colors import detect_transparency, extract_dominant_colors
from asset_analysis.config import AnalysisConfig, AssetCategory, DEFAULT_CONFIG
from asset_analysis.loader import load_raw_image
from asset_analysis.tile_grid import TileDetectionResult, detect_tile_grid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageAnalysisResult:
    """All analysis signals for a single preview image."""
    width: int
    height: int
    has_transparency: bool
    tile_grid: Optional[TileDetectionResult]
    animation: Optional[AnimationDetectionResult]
    dominant_colors: List[str] = field(default_factory=list)
    category: AssetCategory = AssetCategory.OTHER
    confidence: float = 0.0

    def to_dict(self) -> dict:
        return {
            "width": int(self.width),
            "height": int(self.height),
            "has_transparency": bool(self.has_transparency),
            "tile_grid": self.tile_grid.to_dict() if self.tile_grid else None,
            "animation": self.animation.to_dict() if self.animation else None,
            "dominant_colors": list(self.dominant_colors),
            "category": self.category.value,
            "confidence": float(self.confidence),
        }

    def to_record(self) -> dict:
        """Flatten into the column layout of the catalog's analysis table."""
        grid = self.tile_grid
        anim = self.animation
        return {
            "category": self.category.value,
            "width": int(self.width),
            "height": int(self.height),
            "tile_width": grid.tile_width if grid else None,
            "tile_height": grid.tile_height if grid else None,
            "has_transparency": 1 if self.has_transparency else 0,
            "dominant_colors": json.dumps(list(self.dominant_colors)),
            "confidence": float(self.confidence),
            "frame_width": anim.frame_width if anim else None,
            "frame_height": anim.frame_height if anim else None,
            "frame_count": anim.frame_count if anim else None,
            "is_animation": 1 if anim and anim.is_animation_strip else 0,
        }


def analyze_image(
    raw: RawImageBuffer,
    tags: Iterable[str] = (),
    config: AnalysisConfig = DEFAULT_CONFIG,
    max_colors: int = 5,
) -> ImageAnalysisResult:
    """Analyse a decoded image.

    Args:
        raw: Decoded pixel buffer.
        tags: Free-form catalog tags for the asset.
        config: Detector thresholds.
        max_colors: Number of dominant colours to keep.

    Returns:
        ImageAnalysisResult with grid, animation, colours and category.
    """
    tags = tuple(tags)
    has_transparency = detect_transparency(raw)
    tile_grid = detect_tile_grid(raw, config)
    animation = detect_animation_frames(raw, tile_grid, config)
    dominant_colors = extract_dominant_colors(raw, max_colors, config)

    verdict = categorize(CategorizationInput(
        width=raw.width,
        height=raw.height,
        has_transparency=has_transparency,
        tile_grid=tile_grid,
        animation=animation,
        tags=tags,
    ))

    return ImageAnalysisResult(
        width=raw.width,
        height=raw.height,
        has_transparency=has_transparency,
        tile_grid=tile_grid,
        animation=animation,
        dominant_colors=dominant_colors,
        category=verdict.category,
        confidence=verdict.confidence,
    )


def analyze_file(
    path: Union[str, Path],
    tags: Iterable[str] = (),
    config: AnalysisConfig = DEFAULT_CONFIG,
    max_colors: int = 5,
) -> ImageAnalysisResult:
    """Load an image file and analyse it."""
    raw = load_raw_image(path)
    result = analyze_image(raw, tags=tags, config=config, max_colors=max_colors)
    logger.debug("%s: %s (%.2f)", path, result.category.value, result.confidence)
    return result


# ---------------------------------------------------------------------------
# Batch analysis
# ---------------------------------------------------------------------------

def _analyze_job(job) -> Optional[ImageAnalysisResult]:
    """Worker entry point; must stay module level so it pickles."""
    path, tags, config, max_colors = job
    try:
        return analyze_file(path, tags=tags, config=config, max_colors=max_colors)
    except AnalysisError as e:
        logger.warning("Skipping %s: %s", path, e)
        return None


def analyze_batch(
    paths: Sequence[Union[str, Path]],
    tags_by_path: Optional[Dict[str, Sequence[str]]] = None,
    workers: Optional[int] = None,
    config: AnalysisConfig = DEFAULT_CONFIG,
    max_colors: int = 5,
) -> List[Optional[ImageAnalysisResult]]:
    """Analyse many files, one worker process per image at a time.

    Args:
        paths: Image files.
        tags_by_path: Optional tags keyed by str(path).
        workers: Pool size. Defaults to min(len(paths), cpu_count).
        config: Detector thresholds shared by every job.
        max_colors: Number of dominant colours to keep.

    Returns:
        Results in input order; None where the file could not be decoded.
    """
    tags_by_path = tags_by_path or {}
    jobs = [
        (str(p), tuple(tags_by_path.get(str(p), ())), config, max_colors)
        for p in paths
    ]
    if not jobs:
        return []

    if workers is None:
        workers = min(len(jobs), max(1, multiprocessing.cpu_count()))
    workers = max(1, min(workers, len(jobs)))

    if workers == 1:
        return [_analyze_job(job) for job in jobs]

    logger.info("Analysing %d images with %d workers", len(jobs), workers)
    with multiprocessing.Pool(processes=workers) as pool:
        return pool.map(_analyze_job, jobs)
