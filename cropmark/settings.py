"""Per-image edit settings and the operations that mutate them.

Every mutation that touches the fit or the offsets leaves the record with
``0 <= offset <= max_offset`` on both axes.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Mapping, Optional, Tuple

from cropmark.config import CROP_HEIGHT, CROP_WIDTH, DEFAULT_SETTINGS, LogoPosition
from cropmark.geometry import FitGeometry, clamp_offset, compute_cover_fit

Size = Tuple[float, float]


@dataclass
class ImageSettings:
    keep_original: bool = False
    add_gradient: bool = False
    logo_position: LogoPosition = LogoPosition.TOP_RIGHT
    draw_w: float = 0.0
    draw_h: float = 0.0
    offset_x: float = 0.0
    offset_y: float = 0.0
    max_offset_x: float = 0.0
    max_offset_y: float = 0.0

    def apply_fit(self, fit: FitGeometry) -> None:
        for f in fields(fit):
            setattr(self, f.name, getattr(fit, f.name))
        self.clamp()

    def clamp(self) -> None:
        self.offset_x = clamp_offset(self.offset_x, self.max_offset_x)
        self.offset_y = clamp_offset(self.offset_y, self.max_offset_y)

    def frame_size(self, image_size: Size, crop_size: Size = (CROP_WIDTH, CROP_HEIGHT)) -> Tuple[int, int]:
        """Size of the output frame: native when keeping the original, else the crop."""
        w, h = image_size if self.keep_original else crop_size
        return int(round(w)), int(round(h))

    def policy(self) -> dict:
        return {
            "keep_original": self.keep_original,
            "add_gradient": self.add_gradient,
            "logo_position": self.logo_position,
        }


def create_settings(
    image_size: Size,
    defaults: Optional[Mapping] = None,
    crop_size: Size = (CROP_WIDTH, CROP_HEIGHT),
) -> ImageSettings:
    opts = dict(DEFAULT_SETTINGS)
    opts.update(defaults or {})
    settings = ImageSettings(
        keep_original=bool(opts["keep_original"]),
        add_gradient=bool(opts["add_gradient"]),
        logo_position=LogoPosition(opts["logo_position"]),
    )
    settings.apply_fit(compute_cover_fit(*image_size, *crop_size, settings.keep_original))
    return settings


def set_keep_original(
    settings: ImageSettings,
    image_size: Size,
    keep_original: bool,
    crop_size: Size = (CROP_WIDTH, CROP_HEIGHT),
) -> None:
    # offsets are re-centred on every toggle, never carried over
    settings.keep_original = bool(keep_original)
    settings.apply_fit(compute_cover_fit(*image_size, *crop_size, settings.keep_original))


def begin_drag(settings: ImageSettings) -> Tuple[float, float]:
    """Capture the offsets a drag will be applied relative to."""
    return settings.offset_x, settings.offset_y


def set_offset(
    settings: ImageSettings,
    dx: float,
    dy: float,
    start: Optional[Tuple[float, float]] = None,
) -> None:
    """Move the visible window by ``(dx, dy)`` from ``start``.

    Only an axis where the scaled image overflows the frame can move.
    """
    start_x, start_y = start if start is not None else begin_drag(settings)
    if settings.max_offset_x > 0:
        settings.offset_x = start_x + dx
    if settings.max_offset_y > 0:
        settings.offset_y = start_y + dy
    settings.clamp()


def set_gradient(settings: ImageSettings, add_gradient: bool) -> None:
    settings.add_gradient = bool(add_gradient)


def set_logo_position(settings: ImageSettings, position: LogoPosition) -> None:
    settings.logo_position = LogoPosition(position)


def apply_policy(
    settings: ImageSettings,
    policy: Mapping,
    image_size: Size,
    crop_size: Size = (CROP_WIDTH, CROP_HEIGHT),
) -> None:
    """Copy keep-original/gradient/logo choices and re-derive this image's fit."""
    settings.add_gradient = bool(policy["add_gradient"])
    settings.logo_position = LogoPosition(policy["logo_position"])
    set_keep_original(settings, image_size, policy["keep_original"], crop_size)
