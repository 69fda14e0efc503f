"""Rule-based asset categorization from image signals and catalog tags."""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from asset_analysis.animation import AnimationDetectionResult
from asset_analysis.config import AssetCategory
from asset_analysis.tile_grid import TileDetectionResult


SPRITE_KEYWORDS = ("sprite", "animation", "spritesheet", "walk", "run", "idle")
ICON_KEYWORDS = ("icon", "item")
UI_KEYWORDS = ("ui", "button", "hud", "menu", "interface", "gui")
CHARACTER_KEYWORDS = ("character", "player", "enemy", "npc", "hero")
EFFECT_KEYWORDS = ("effect", "particle", "explosion", "magic", "fire", "smoke")
BACKGROUND_KEYWORDS = ("background", "parallax", "sky", "landscape")

SMALL_ASSET_PX = 128
LARGE_ASSET_PX = 512
STRIP_ASPECT_RATIO = 4.0

# Evidence thresholds
MIN_ANIMATION_CONFIDENCE = 0.6
MIN_TILE_GRID_SCORE = 0.6
MIN_TILESHEET_TILES = 4
MIN_FRAME_SIMILARITY = 0.5

# Confidence reported per rule
SPRITE_STRIP_TAGGED_CONFIDENCE = 0.9
ANIMATION_SIGNAL_CONFIDENCE = 0.75
SPRITE_HINT_CONFIDENCE = 0.7
ICON_TAGGED_CONFIDENCE = 0.85
ICON_CONFIDENCE = 0.65
UI_CONFIDENCE = 0.75
CHARACTER_CONFIDENCE = 0.7
EFFECT_CONFIDENCE = 0.7
BACKGROUND_TAGGED_CONFIDENCE = 0.8
BACKGROUND_CONFIDENCE = 0.6
FALLBACK_CONFIDENCE = 0.3


@dataclass(frozen=True)
class CategorizationInput:
    width: int
    height: int
    has_transparency: bool
    tile_grid: Optional[TileDetectionResult] = None
    animation: Optional[AnimationDetectionResult] = None
    tags: Tuple[str, ...] = ()

    def __post_init__(self):
        if not isinstance(self.tags, tuple):
            object.__setattr__(self, "tags", tuple(self.tags))


@dataclass(frozen=True)
class CategorizationResult:
    category: AssetCategory
    confidence: float

    def to_dict(self) -> dict:
        return {"category": self.category.value, "confidence": float(self.confidence)}


def tags_match(tags: Iterable[str], keywords: Iterable[str]) -> bool:
    """True if any tag contains a keyword or is contained in one (case-insensitive).

    Blank tags never match.
    """
    normalized = [t.strip().lower() for t in tags]
    normalized = [t for t in normalized if t]
    for kw in keywords:
        for tag in normalized:
            if kw in tag or tag in kw:
                return True
    return False


def categorize(inp: CategorizationInput) -> CategorizationResult:
    """Pick a category with the first rule that fires.

    Rules run from the strongest pixel evidence (animation, tile grid, strip
    shape) to tag-only hints, falling back to "other".
    """
    width, height = inp.width, inp.height
    transparent = inp.has_transparency
    tile_grid = inp.tile_grid
    animation = inp.animation
    tags = inp.tags

    # 1. animation strip detected from the pixels
    if (animation is not None and animation.is_animation_strip
            and animation.confidence > MIN_ANIMATION_CONFIDENCE):
        return CategorizationResult(AssetCategory.SPRITESHEET, animation.confidence)

    # 2. large tile grid with more than 4 tiles
    if (tile_grid is not None and tile_grid.score > MIN_TILE_GRID_SCORE
            and width > SMALL_ASSET_PX and height > SMALL_ASSET_PX
            and tile_grid.columns * tile_grid.rows > MIN_TILESHEET_TILES):
        return CategorizationResult(AssetCategory.TILESHEET, tile_grid.score)

    # 3. spritesheet from shape, tags or weaker animation evidence
    aspect_ratio = width / height if height > 0 else 0.0
    is_horizontal_strip = aspect_ratio >= STRIP_ASPECT_RATIO and transparent
    has_sprite_tags = tags_match(tags, SPRITE_KEYWORDS)
    has_animation_signal = (animation is not None
                            and animation.frame_similarity > MIN_FRAME_SIMILARITY)

    if is_horizontal_strip or (has_sprite_tags and transparent) or has_animation_signal:
        if is_horizontal_strip and has_sprite_tags:
            confidence = SPRITE_STRIP_TAGGED_CONFIDENCE
        elif has_animation_signal:
            confidence = max(ANIMATION_SIGNAL_CONFIDENCE, animation.confidence)
        else:
            confidence = SPRITE_HINT_CONFIDENCE
        return CategorizationResult(AssetCategory.SPRITESHEET, confidence)

    # 4. icon
    if width <= SMALL_ASSET_PX and height <= SMALL_ASSET_PX and transparent:
        confidence = (ICON_TAGGED_CONFIDENCE if tags_match(tags, ICON_KEYWORDS)
                      else ICON_CONFIDENCE)
        return CategorizationResult(AssetCategory.ICON, confidence)

    # 5-7. tag driven categories
    if tags_match(tags, UI_KEYWORDS):
        return CategorizationResult(AssetCategory.UI, UI_CONFIDENCE)

    if tags_match(tags, CHARACTER_KEYWORDS) and transparent:
        return CategorizationResult(AssetCategory.CHARACTER, CHARACTER_CONFIDENCE)

    if tags_match(tags, EFFECT_KEYWORDS) and transparent:
        return CategorizationResult(AssetCategory.EFFECT, EFFECT_CONFIDENCE)

    # 8. background
    has_background_tags = tags_match(tags, BACKGROUND_KEYWORDS)
    is_large = width > LARGE_ASSET_PX or height > LARGE_ASSET_PX
    if has_background_tags or (not transparent and is_large and tile_grid is None):
        confidence = (BACKGROUND_TAGGED_CONFIDENCE if has_background_tags
                      else BACKGROUND_CONFIDENCE)
        return CategorizationResult(AssetCategory.BACKGROUND, confidence)

    return CategorizationResult(AssetCategory.OTHER, FALLBACK_CONFIDENCE)
