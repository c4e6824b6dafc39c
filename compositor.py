# compositor.py

from __future__ import annotations

import math
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from config import JPEG_QUALITY

Size = Tuple[int, int]

DEFAULT_BASE_SIZE: Size = (1080, 1920)
DEFAULT_HERO_SIZE: Size = (800, 1200)

# Overlay height as a share of the photo height, before the user scale.
HERO_HEIGHT_RATIO = 0.8

SCALE_MIN, SCALE_MAX = 0.5, 2.0
OPACITY_MIN, OPACITY_MAX = 0.2, 1.0


# ============================================================
# ERRORS
# ============================================================

class CompositeError(Exception):
    """Base for everything that aborts a composite request."""


class InvalidInput(CompositeError):
    """The client sent a photo we cannot use. Maps to 400."""


class MissingAsset(CompositeError):
    """The hero overlay is not available on this server. Maps to 500."""


class ProcessingFailure(CompositeError):
    """Blending, encoding or writing the result failed. Maps to 500."""


# ============================================================
# PARAMS + GEOMETRY
# ============================================================

def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(value, hi))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# Far past any photo edge; geometry clamps it back into the frame.
POSITION_LIMIT = float(2 ** 31)


def _number(value: Optional[float], default: float) -> float:
    """None and NaN fall back to the default."""
    if value is None:
        return default
    value = float(value)
    return default if math.isnan(value) else value


def _position(value: Optional[float], default: int) -> int:
    return _round_half_up(_clamp(_number(value, default), -POSITION_LIMIT, POSITION_LIMIT))


@dataclass(frozen=True)
class PlacementParams:
    side: str = "right"
    scale: float = 1.0
    pos_x: int = 30
    pos_y: int = 30
    opacity: float = 1.0

    @classmethod
    def from_request(
        cls,
        side: Optional[str] = "right",
        scale: Optional[float] = 1.0,
        pos_x: Optional[float] = 30,
        pos_y: Optional[float] = 30,
        opacity: Optional[float] = 1.0,
    ) -> "PlacementParams":
        """
        Build clamped params from raw client values.
        Out-of-range values are corrected, never rejected.
        """
        return cls(
            side="left" if side == "left" else "right",
            scale=_clamp(_number(scale, 1.0), SCALE_MIN, SCALE_MAX),
            pos_x=_position(pos_x, 30),
            pos_y=_position(pos_y, 30),
            opacity=_clamp(_number(opacity, 1.0), OPACITY_MIN, OPACITY_MAX),
        )


@dataclass(frozen=True)
class OverlayGeometry:
    width: int
    height: int
    x: int
    y: int


def compute_geometry(
    base_size: Optional[Size],
    hero_size: Optional[Size],
    params: PlacementParams,
) -> OverlayGeometry:
    """
    Size and place the hero on the photo.

    - height is 80% of the photo height times the user scale
    - width follows the hero's native aspect ratio (never stretched)
    - pos_x is an inset from the chosen side, pos_y an inset from the bottom
    - the offset is clamped so the overlay stays inside the frame; if the
      overlay is bigger than the photo on an axis, that offset pins to 0
    """
    base_w, base_h = base_size or (0, 0)
    if not base_w or not base_h:
        base_w, base_h = DEFAULT_BASE_SIZE

    hero_w, hero_h = hero_size or (0, 0)
    if not hero_w or not hero_h:
        hero_w, hero_h = DEFAULT_HERO_SIZE
    aspect = hero_w / hero_h

    scale = _clamp(params.scale, SCALE_MIN, SCALE_MAX)
    o_h = _round_half_up(base_h * HERO_HEIGHT_RATIO * scale)
    o_w = _round_half_up(o_h * aspect)

    if params.side == "left":
        left = params.pos_x
    else:
        left = base_w - o_w - params.pos_x

    x = max(0, min(base_w - o_w, left))
    y = max(0, min(base_h - o_h, base_h - o_h - params.pos_y))

    return OverlayGeometry(width=o_w, height=o_h, x=x, y=y)


# ============================================================
# PIXELS
# ============================================================

def apply_opacity(overlay: Image.Image, opacity: float) -> Image.Image:
    """
    Multiply every alpha value by the clamped opacity.
    RGB is untouched, so transparent regions stay transparent.
    """
    factor = _clamp(opacity, OPACITY_MIN, OPACITY_MAX)
    arr = np.array(overlay.convert("RGBA"))
    alpha = arr[..., 3].astype(np.float32) * factor
    arr[..., 3] = np.floor(alpha + 0.5).clip(0, 255).astype(np.uint8)
    return Image.fromarray(arr)


def composite_hero(
    base: Image.Image,
    hero: Image.Image,
    params: PlacementParams,
) -> Image.Image:
    """
    Pure blend step: returns a new RGB image the size of `base`.
    """
    geometry = compute_geometry(base.size, hero.size, params)

    overlay = hero.convert("RGBA").resize(
        (geometry.width, geometry.height), Image.LANCZOS
    )
    overlay = apply_opacity(overlay, params.opacity)

    # Clip whatever hangs past the frame (only when the overlay is larger).
    visible_w = min(geometry.width, base.width - geometry.x)
    visible_h = min(geometry.height, base.height - geometry.y)
    if (visible_w, visible_h) != overlay.size:
        overlay = overlay.crop((0, 0, visible_w, visible_h))

    canvas = base.convert("RGBA")
    canvas.alpha_composite(overlay, dest=(geometry.x, geometry.y))
    return canvas.convert("RGB")


def decode_photo(photo_bytes: bytes) -> Image.Image:
    if not photo_bytes:
        raise InvalidInput("photo payload is empty")
    try:
        img = Image.open(BytesIO(photo_bytes))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise InvalidInput(f"photo could not be decoded as an image: {e}") from e
    return img.convert("RGB")


# ============================================================
# COMPOSITOR
# ============================================================

@dataclass(frozen=True)
class CompositeResult:
    filename: str
    path: Path
    width: int
    height: int


class Compositor:
    """
    compose(photo, params) -> CompositeResult

    hero_asset: anything with load() -> RGBA Image (see hero_asset.HeroAsset)
    storage:    anything with save_jpeg(image, quality) -> CompositeResult
    """

    def __init__(self, hero_asset, storage, jpeg_quality: int = JPEG_QUALITY):
        self.hero_asset = hero_asset
        self.storage = storage
        self.jpeg_quality = jpeg_quality

    def compose(self, photo_bytes: bytes, params: PlacementParams) -> CompositeResult:
        base = decode_photo(photo_bytes)
        hero = self.hero_asset.load()

        try:
            combined = composite_hero(base, hero, params)
        except (OSError, ValueError) as e:
            raise ProcessingFailure(f"composite failed: {e}") from e

        result = self.storage.save_jpeg(combined, quality=self.jpeg_quality)
        print(
            f"[composite] {result.filename} "
            f"base={base.width}x{base.height} side={params.side} "
            f"scale={params.scale} opacity={params.opacity}"
        )
        return result
