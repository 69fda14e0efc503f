"""Analysis configuration: detector thresholds, category and orientation enums."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple


# ---------------------------------------------------------------------------
# Tile sizes commonly used by game tilesets (scored with a bonus)
# ---------------------------------------------------------------------------
STANDARD_TILE_SIZES = (8, 16, 24, 32, 48, 64, 128)

# Smallest tile edge the exhaustive divisor scan considers
MIN_TILE_SIZE = 8


class AssetCategory(str, Enum):
    TILESHEET = "tilesheet"
    SPRITESHEET = "spritesheet"
    ICON = "icon"
    UI = "ui"
    CHARACTER = "character"
    EFFECT = "effect"
    BACKGROUND = "background"
    OTHER = "other"


class AnimationOrientation(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    GRID = "grid"


@dataclass(frozen=True)
class AnalysisConfig:
    """Thresholds for the pixel analysis detectors.

    The scoring constants were tuned by hand against real asset previews.
    Changing them shifts classification outcomes, so overrides are meant for
    experiments and tests rather than production runs.
    """
    # Tile grid candidate search
    standard_tile_sizes: Tuple[int, ...] = STANDARD_TILE_SIZES
    min_tile_size: int = MIN_TILE_SIZE
    tile_score_threshold: float = 0.6
    standard_size_bonus: float = 1.15

    # Boundary discontinuity scoring
    ratio_floor: float = 1.2                # below this the grid is noise
    ratio_ceiling: float = 3.0              # at or above this the grid is certain
    flat_interior_threshold: float = 0.5    # mean inner diff treated as flat
    boundary_significance: float = 5.0      # boundary diff needed on flat tiles
    flat_interior_score: float = 0.8
    interior_sample_divisor: int = 3        # sample every tile_height / 3 rows
    boundary_margin: int = 2                # rows this close to a line are skipped

    # Dominant colours
    color_sample_target: int = 10_000
    color_quantization_step: int = 32
    color_alpha_cutoff: int = 128

    # Animation strips
    animation_similarity_threshold: float = 0.7
    transparent_cell_alpha: float = 240.0
    animation_confidence_base: float = 0.5
    animation_similarity_weight: float = 0.4
    animation_transparency_bonus: float = 0.1

    def __post_init__(self):
        if self.min_tile_size < 1:
            raise ValueError(f"min_tile_size must be >= 1, got {self.min_tile_size}")
        if any(size < 1 for size in self.standard_tile_sizes):
            raise ValueError(f"standard_tile_sizes must be positive, got "
                             f"{self.standard_tile_sizes}")
        if self.ratio_ceiling <= self.ratio_floor:
            raise ValueError(
                f"ratio_ceiling ({self.ratio_ceiling}) must exceed "
                f"ratio_floor ({self.ratio_floor})"
            )
        for name in ("interior_sample_divisor", "color_sample_target",
                     "color_quantization_step"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")

    def with_overrides(self, **changes) -> "AnalysisConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def is_standard_size(self, size: int) -> bool:
        return size in self.standard_tile_sizes


DEFAULT_CONFIG = AnalysisConfig()
