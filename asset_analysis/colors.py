"""Transparency detection and dominant colour extraction."""

import logging
from collections import Counter
from typing import List

import numpy as np

from asset_analysis.buffer import RawImageBuffer
from asset_analysis.config import AnalysisConfig, DEFAULT_CONFIG

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Transparency detection
# ---------------------------------------------------------------------------

def detect_transparency(raw: RawImageBuffer) -> bool:
    """Check whether any pixel has an alpha value below 255."""
    if raw.channels < 4 or raw.is_empty:
        return False
    alpha = raw.pixels[:, :, 3]
    return bool(np.any(alpha < 255))


# ---------------------------------------------------------------------------
# Dominant colours
# ---------------------------------------------------------------------------

def _quantize(values: np.ndarray, step: int) -> np.ndarray:
    # round half up to the nearest multiple of step; 256 is folded into 255
    q = ((values.astype(np.int32) + step // 2) // step) * step
    return np.minimum(q, 255)


def extract_dominant_colors(
    raw: RawImageBuffer,
    max_colors: int = 5,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> List[str]:
    """Return the most frequent quantized colours as '#rrggbb' strings.

    Pixels are sampled with a flat stride over the linear pixel index, so on
    wide images the samples drift diagonally across rows. Mostly transparent
    pixels are ignored.

    Args:
        raw: Decoded image.
        max_colors: Maximum number of colours to return.
        config: Sampling and quantization settings.

    Returns:
        Hex colour strings, most frequent first.
    """
    total = raw.width * raw.height
    if total == 0 or max_colors <= 0:
        return []

    step = max(1, total // config.color_sample_target)
    flat = raw.pixels.reshape(-1, raw.channels)
    samples = flat[::step]
    if raw.channels >= 4:
        samples = samples[samples[:, 3] >= config.color_alpha_cutoff]

    if len(samples) == 0:
        return []

    rgb = _quantize(samples[:, :3], config.color_quantization_step)
    keys = (rgb[:, 0] << 16) | (rgb[:, 1] << 8) | rgb[:, 2]
    counts = Counter(keys.tolist())

    logger.debug("Sampled %d pixels (stride %d), %d quantized colours",
                 len(samples), step, len(counts))

    return [f"#{key:06x}" for key, _ in counts.most_common(max_colors)]
