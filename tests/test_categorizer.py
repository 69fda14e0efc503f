"""Tests for the rule-based asset categorizer."""

from __future__ import annotations

import pytest

from asset_analysis import categorizer
from asset_analysis.animation import AnimationDetectionResult
from asset_analysis.categorizer import CategorizationInput, categorize, tags_match
from asset_analysis.config import AnimationOrientation, AssetCategory
from asset_analysis.tile_grid import TileDetectionResult


def _animation(is_strip: bool = True, similarity: float = 0.95,
               confidence: float = 0.98) -> AnimationDetectionResult:
    return AnimationDetectionResult(
        is_animation_strip=is_strip,
        frame_width=32,
        frame_height=32,
        frame_count=8,
        columns=8,
        rows=1,
        orientation=AnimationOrientation.HORIZONTAL,
        frame_similarity=similarity,
        confidence=confidence,
    )


def _tile_grid(score: float = 0.92, columns: int = 8, rows: int = 8) -> TileDetectionResult:
    return TileDetectionResult(tile_width=32, tile_height=32, columns=columns,
                               rows=rows, score=score)


def _categorize(**kwargs):
    result = categorize(CategorizationInput(**kwargs))
    return result.category, result.confidence


# ---------------------------------------------------------------------------
# Tests: tag matching
# ---------------------------------------------------------------------------


class TestTagsMatch:
    def test_case_insensitive(self):
        assert tags_match(["ICON"], ["icon"])

    def test_tag_contains_keyword(self):
        assert tags_match(["pixel-sprites"], ["sprite"])

    def test_keyword_contains_tag(self):
        assert tags_match(["anim"], ["animation"])

    def test_no_match(self):
        assert not tags_match(["forest", "tree"], ["ui", "button"])

    def test_blank_tags_ignored(self):
        assert not tags_match(["", "   "], ["icon"])


# ---------------------------------------------------------------------------
# Tests: rule cascade
# ---------------------------------------------------------------------------


class TestCategorize:
    def test_animation_strip_wins(self):
        category, confidence = _categorize(
            width=256, height=256, has_transparency=True,
            tile_grid=_tile_grid(), animation=_animation(confidence=0.96),
        )
        assert category == AssetCategory.SPRITESHEET
        assert confidence == 0.96

    def test_weak_animation_falls_through_to_tilesheet(self):
        category, confidence = _categorize(
            width=256, height=256, has_transparency=True,
            tile_grid=_tile_grid(score=0.92),
            animation=_animation(is_strip=True, confidence=0.6),
        )
        assert category == AssetCategory.TILESHEET
        assert confidence == 0.92

    def test_tilesheet_needs_large_image(self):
        category, confidence = _categorize(
            width=128, height=128, has_transparency=False,
            tile_grid=_tile_grid(columns=4, rows=4),
        )
        assert (category, confidence) == (AssetCategory.OTHER, 0.3)

    def test_tilesheet_needs_more_than_four_tiles(self):
        category, _ = _categorize(
            width=256, height=256, has_transparency=False,
            tile_grid=_tile_grid(columns=2, rows=2),
        )
        assert category == AssetCategory.OTHER

    def test_horizontal_strip(self):
        assert _categorize(width=512, height=64, has_transparency=True) == (
            AssetCategory.SPRITESHEET, 0.7)

    def test_horizontal_strip_with_sprite_tags(self):
        assert _categorize(width=512, height=64, has_transparency=True,
                           tags=["Walk cycle"]) == (AssetCategory.SPRITESHEET, 0.9)

    def test_sprite_tags_need_transparency(self):
        category, _ = _categorize(width=300, height=300, has_transparency=False,
                                  tags=["sprite"])
        assert category == AssetCategory.OTHER

    def test_animation_signal_without_strip(self):
        category, confidence = _categorize(
            width=300, height=300, has_transparency=False,
            animation=_animation(is_strip=False, similarity=0.6, confidence=0.0),
        )
        assert category == AssetCategory.SPRITESHEET
        assert confidence == 0.75

    def test_animation_signal_keeps_higher_confidence(self):
        _, confidence = _categorize(
            width=300, height=300, has_transparency=True,
            animation=_animation(is_strip=True, similarity=0.9, confidence=0.55),
        )
        assert confidence == 0.75
        _, confidence = _categorize(
            width=300, height=300, has_transparency=False,
            animation=_animation(is_strip=False, similarity=0.9, confidence=0.8),
        )
        assert confidence == 0.8

    def test_icon_with_tags(self):
        assert _categorize(width=64, height=64, has_transparency=True,
                           tags=["icon", "sword"]) == (AssetCategory.ICON, 0.85)

    def test_icon_without_tags(self):
        assert _categorize(width=32, height=128, has_transparency=True) == (
            AssetCategory.ICON, 0.65)

    def test_ui(self):
        assert _categorize(width=300, height=200, has_transparency=False,
                           tags=["GUI pack"]) == (AssetCategory.UI, 0.75)

    def test_character(self):
        assert _categorize(width=300, height=300, has_transparency=True,
                           tags=["Hero"]) == (AssetCategory.CHARACTER, 0.7)

    def test_effect(self):
        assert _categorize(width=300, height=300, has_transparency=True,
                           tags=["explosion"]) == (AssetCategory.EFFECT, 0.7)

    def test_effect_needs_transparency(self):
        assert _categorize(width=300, height=300, has_transparency=False,
                           tags=["fire"]) == (AssetCategory.OTHER, 0.3)

    def test_background_from_tags(self):
        assert _categorize(width=1024, height=768, has_transparency=False,
                           tags=["background", "forest"]) == (AssetCategory.BACKGROUND, 0.8)

    def test_background_from_size(self):
        assert _categorize(width=1024, height=768, has_transparency=False) == (
            AssetCategory.BACKGROUND, 0.6)

    def test_large_with_weak_grid_is_not_background(self):
        category, _ = _categorize(width=1024, height=768, has_transparency=False,
                                  tile_grid=_tile_grid(score=0.6))
        assert category == AssetCategory.OTHER

    def test_fallback(self):
        assert _categorize(width=50, height=50, has_transparency=False) == (
            AssetCategory.OTHER, 0.3)

    def test_zero_height_does_not_divide(self):
        category, _ = _categorize(width=10, height=0, has_transparency=False)
        assert category == AssetCategory.OTHER

    @pytest.mark.parametrize("tags", [[], ["icon"], ["walk", "hero"], ["sky"]])
    def test_deterministic(self, tags):
        inp = CategorizationInput(width=200, height=40, has_transparency=True, tags=tags)
        assert categorize(inp) == categorize(inp)

    def test_tags_stored_as_tuple(self):
        inp = CategorizationInput(width=1, height=1, has_transparency=False,
                                  tags=["a", "b"])
        assert inp.tags == ("a", "b")


class TestThresholdBoundaries:
    def test_animation_confidence_must_exceed_minimum(self):
        category, confidence = _categorize(
            width=256, height=256, has_transparency=True,
            animation=_animation(confidence=categorizer.MIN_ANIMATION_CONFIDENCE),
        )
        # rejected by the strip rule, still caught by the similarity signal
        assert category == AssetCategory.SPRITESHEET
        assert confidence == categorizer.ANIMATION_SIGNAL_CONFIDENCE

    def test_grid_score_must_exceed_minimum(self):
        category, _ = _categorize(
            width=256, height=256, has_transparency=False,
            tile_grid=_tile_grid(score=categorizer.MIN_TILE_GRID_SCORE),
        )
        assert category == AssetCategory.OTHER

    def test_similarity_must_exceed_minimum(self):
        category, confidence = _categorize(
            width=300, height=300, has_transparency=False,
            animation=_animation(is_strip=False,
                                 similarity=categorizer.MIN_FRAME_SIMILARITY,
                                 confidence=0.0),
        )
        assert (category, confidence) == (AssetCategory.OTHER,
                                          categorizer.FALLBACK_CONFIDENCE)
