"""Decode preview image files into RawImageBuffer with Pillow."""

import logging
from pathlib import Path
from typing import Iterable, List, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from asset_analysis.buffer import ImageLoadError, RawImageBuffer

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".webp"}

# modes with a real alpha channel
_ALPHA_MODES = {"RGBA", "LA", "PA", "RGBa", "La"}


def load_raw_image(path: Union[str, Path]) -> RawImageBuffer:
    """Decode an image file into an 8-bit RGB or RGBA buffer.

    Images without an alpha channel still count as transparent when they
    carry a transparency key (palette index or tRNS colour).
    """
    try:
        with Image.open(path) as pil_img:
            pil_img.load()
            mode = pil_img.mode
            has_alpha = mode in _ALPHA_MODES or "transparency" in pil_img.info
            if has_alpha:
                img = np.array(pil_img.convert("RGBA"))
            else:
                img = np.array(pil_img.convert("RGB"))
    except (OSError, ValueError, UnidentifiedImageError,
            Image.DecompressionBombError) as e:
        raise ImageLoadError(f"Failed to decode {path}: {e}") from e

    raw = RawImageBuffer.from_array(img, has_alpha=has_alpha)
    logger.debug("Loaded %s: %dx%d, %d channels (source mode %s)",
                 path, raw.width, raw.height, raw.channels, mode)
    return raw


def gather_images(inputs: Iterable[Union[str, Path]],
                  recursive: bool = False) -> List[Path]:
    """Collect image paths from file/directory arguments."""
    paths = []
    for inp in inputs:
        p = Path(inp)
        if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS:
            paths.append(p)
        elif p.is_dir():
            pattern = "**/*" if recursive else "*"
            paths.extend(
                f for f in sorted(p.glob(pattern))
                if f.is_file() and f.suffix.lower() in IMAGE_EXTENSIONS
            )
    return paths
