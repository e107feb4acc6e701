"""Composite one photo into its output frame.

Draw order is fixed: photo, then gradient overlay, then logo. The logo is
placed only after the frame has been sized so it always lands inside the
final frame and is never covered by the gradient.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
from PIL import Image

from cropmark.config import (
    CROP_HEIGHT,
    CROP_WIDTH,
    GRADIENT_RGB,
    GRADIENT_STOPS,
    LOGO_MARGIN,
    LOGO_PATH,
    LOGO_SIZE,
    LogoPosition,
)
from cropmark.geometry import compute_logo_size, gradient_alpha, gradient_axis, logo_placement
from cropmark.imaging import encode_png
from cropmark.settings import ImageSettings

logger = logging.getLogger(__name__)


class RenderSurface:
    """The destination frame renders are drawn into.

    One surface is shared by everything that renders for a session, so a
    render must be fully encoded before the next one starts.
    """

    def __init__(self) -> None:
        self.image: Optional[Image.Image] = None

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size if self.image is not None else (0, 0)

    def resize(self, width: int, height: int) -> None:
        # resizing always starts from a cleared, transparent frame
        self.image = Image.new("RGBA", (max(1, width), max(1, height)), (0, 0, 0, 0))

    def to_png(self) -> bytes:
        if self.image is None:
            raise ValueError("Nothing has been rendered yet")
        return encode_png(self.image)


class LogoAsset:
    """A logo read once from ``path`` and shared read-only by every render."""

    def __init__(self, path: Union[str, Path, None] = LOGO_PATH) -> None:
        self.path = Path(path) if path is not None else None
        self.image: Optional[Image.Image] = None
        self.complete = False

    @classmethod
    def from_image(cls, img: Image.Image) -> "LogoAsset":
        asset = cls(path=None)
        asset.image = img.convert("RGBA")
        asset.complete = True
        return asset

    @property
    def natural_size(self) -> Tuple[int, int]:
        return self.image.size if self.image is not None else (0, 0)

    def load(self) -> "LogoAsset":
        """Read the logo file. A missing or broken file still completes,
        with no drawable image, and renders then skip the logo."""
        if self.complete:
            return self
        try:
            if self.path is None:
                raise FileNotFoundError("no logo path")
            with Image.open(self.path) as img:
                self.image = img.convert("RGBA")
        except OSError as e:
            logger.warning("Logo could not be loaded from %s: %s", self.path, e)
            self.image = None
        self.complete = True
        return self


def gradient_mask(position: LogoPosition, width: int, height: int, stops=GRADIENT_STOPS) -> np.ndarray:
    """Per-pixel overlay alpha (0..1) for a linear gradient from the logo corner
    to the opposite corner, sampled at pixel centres."""
    (x0, y0), (x1, y1) = gradient_axis(position, width, height)
    dx, dy = x1 - x0, y1 - y0
    xs = np.arange(width, dtype=np.float64) + 0.5
    ys = np.arange(height, dtype=np.float64) + 0.5
    t = ((xs[None, :] - x0) * dx + (ys[:, None] - y0) * dy) / (dx * dx + dy * dy)
    return gradient_alpha(t, stops)


def build_gradient_layer(position: LogoPosition, width: int, height: int) -> Image.Image:
    alpha = gradient_mask(position, width, height)
    layer = np.zeros((height, width, 4), dtype=np.uint8)
    layer[..., :3] = GRADIENT_RGB
    layer[..., 3] = np.clip(np.rint(alpha * 255), 0, 255).astype(np.uint8)
    return Image.fromarray(layer)


def build_logo_layer(
    frame_size: Tuple[int, int], position: LogoPosition, logo: LogoAsset
) -> Optional[Image.Image]:
    W, H = frame_size
    logo_w, logo_h = compute_logo_size(*logo.natural_size, H, LOGO_SIZE)
    if logo_w == 0 or logo_h == 0:
        return None
    x, y = logo_placement(position, W, H, logo_w, logo_h, LOGO_MARGIN)
    scaled = logo.image.resize(
        (max(1, int(round(logo_w))), max(1, int(round(logo_h)))),
        Image.Resampling.LANCZOS,
    )
    layer = Image.new("RGBA", (W, H), (0, 0, 0, 0))
    layer.paste(scaled, (int(round(x)), int(round(y))))
    return layer


def draw_photo(surface: RenderSurface, image: Image.Image, settings: ImageSettings) -> None:
    """Draw the scaled photo at ``(-offset_x, -offset_y)``.

    Equivalent to scaling the whole photo to ``draw_w x draw_h`` and
    cropping the frame-sized window, done as a single resample of the
    matching source box.
    """
    W, H = surface.size
    img_w, img_h = image.size
    scale_x = settings.draw_w / img_w
    scale_y = settings.draw_h / img_h
    box = (
        max(0.0, settings.offset_x / scale_x),
        max(0.0, settings.offset_y / scale_y),
        min(float(img_w), (settings.offset_x + W) / scale_x),
        min(float(img_h), (settings.offset_y + H) / scale_y),
    )
    if (W, H) == (img_w, img_h) and box == (0.0, 0.0, float(img_w), float(img_h)):
        window = image.convert("RGBA")
    else:
        window = image.convert("RGBA").resize((W, H), Image.Resampling.LANCZOS, box=box)
    surface.image.alpha_composite(window)


def render(
    surface: RenderSurface,
    image: Image.Image,
    settings: ImageSettings,
    logo: Optional[LogoAsset] = None,
    crop_size: Tuple[int, int] = (CROP_WIDTH, CROP_HEIGHT),
) -> None:
    surface.resize(*settings.frame_size(image.size, crop_size))
    W, H = surface.size

    draw_photo(surface, image, settings)

    if settings.add_gradient:
        surface.image.alpha_composite(build_gradient_layer(settings.logo_position, W, H))

    # an unloaded logo is not an error, the frame just goes out without it
    if logo is not None and logo.complete:
        layer = build_logo_layer((W, H), settings.logo_position, logo)
        if layer is not None:
            surface.image.alpha_composite(layer)
