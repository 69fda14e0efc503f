"""Decoded pixel buffers handed to the analysis detectors."""

from dataclasses import dataclass
from typing import Optional

import numpy as np


class AnalysisError(Exception):
    """Base error for the asset analysis package."""


class ImageBufferError(AnalysisError, ValueError):
    """The pixel buffer is malformed or does not match its declared shape."""


class ImageLoadError(AnalysisError):
    """An image file could not be decoded into a pixel buffer."""


@dataclass(frozen=True)
class RawImageBuffer:
    """Row-major, channel-interleaved 8-bit pixels (R, G, B[, A])."""
    width: int
    height: int
    channels: int
    has_alpha: bool
    data: bytes

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ImageBufferError(
                f"Image dimensions must be non-negative, got {self.width}x{self.height}"
            )
        if self.channels not in (3, 4):
            raise ImageBufferError(f"Expected 3 or 4 channels, got {self.channels}")
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))
        expected = self.width * self.height * self.channels
        if len(self.data) != expected:
            raise ImageBufferError(
                f"Buffer holds {len(self.data)} bytes, expected {expected} "
                f"for {self.width}x{self.height}x{self.channels}"
            )

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @property
    def pixels(self) -> np.ndarray:
        """Read-only (height, width, channels) uint8 view of the buffer."""
        arr = np.frombuffer(self.data, dtype=np.uint8)
        return arr.reshape(self.height, self.width, self.channels)

    @classmethod
    def from_array(cls, img: np.ndarray,
                   has_alpha: Optional[bool] = None) -> "RawImageBuffer":
        """Build a buffer from an HxWx3 or HxWx4 uint8 array."""
        if img.ndim != 3:
            raise ImageBufferError(f"Expected an HxWxC array, got shape {img.shape}")
        h, w, c = img.shape
        if has_alpha is None:
            has_alpha = c == 4
        data = np.ascontiguousarray(img, dtype=np.uint8).tobytes()
        return cls(width=w, height=h, channels=c, has_alpha=has_alpha, data=data)
