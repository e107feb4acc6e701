"""Frame geometry: cover-fit, pan bounds, logo box and gradient axis.

Everything here is a pure function of its arguments. Sizes are floats in
pixels of the output frame; offsets are measured in pixels of the scaled
image (the top-left corner of the visible window).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from cropmark.config import GRADIENT_STOPS, LogoPosition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FitGeometry:
    draw_w: float
    draw_h: float
    offset_x: float
    offset_y: float
    max_offset_x: float
    max_offset_y: float


def compute_cover_fit(
    img_w: float,
    img_h: float,
    target_w: float,
    target_h: float,
    keep_original: bool,
) -> FitGeometry:
    """Scale an image so it covers ``target_w x target_h`` and centre the crop.

    With ``keep_original`` the frame is the image itself: native size, no pan.
    """
    if keep_original:
        return FitGeometry(float(img_w), float(img_h), 0.0, 0.0, 0.0, 0.0)

    # cover, never letterbox
    scale = max(target_w / img_w, target_h / img_h)
    draw_w = img_w * scale
    draw_h = img_h * scale
    # the axis that decided the scale fits exactly; drop float noise so it
    # cannot pan
    if math.isclose(draw_w, target_w):
        draw_w = float(target_w)
    if math.isclose(draw_h, target_h):
        draw_h = float(target_h)
    max_x = max(0.0, draw_w - target_w)
    max_y = max(0.0, draw_h - target_h)
    return FitGeometry(draw_w, draw_h, max_x / 2, max_y / 2, max_x, max_y)


def clamp_offset(value: float, max_value: float) -> float:
    return max(0.0, min(max_value, value))


def compute_logo_size(
    logo_w: Optional[float],
    logo_h: Optional[float],
    frame_h: float,
    size_fraction: float,
) -> Tuple[float, float]:
    """Return the drawn logo size, or ``(0, 0)`` when the logo must be skipped."""
    if not logo_w or not logo_h or logo_w <= 0 or logo_h <= 0:
        logger.warning("Invalid logo dimensions: %s x %s", logo_w, logo_h)
        return 0.0, 0.0
    height = frame_h * size_fraction
    width = logo_w * (height / logo_h)
    return width, height


def logo_placement(
    position: LogoPosition,
    frame_w: float,
    frame_h: float,
    logo_w: float,
    logo_h: float,
    margin_fraction: float,
) -> Tuple[float, float]:
    position = LogoPosition(position)
    margin = logo_h * margin_fraction
    x = margin if position.is_left else frame_w - logo_w - margin
    y = margin if position.is_top else frame_h - logo_h - margin
    return x, y


def drag_delta(
    start_x: float,
    start_y: float,
    cur_x: float,
    cur_y: float,
    scale_x: float = 1.0,
    scale_y: float = 1.0,
) -> Tuple[float, float]:
    """Pointer travel converted to an offset change.

    The window moves opposite to the pointer: dragging right reveals more of
    the left side of the photo.
    """
    return (start_x - cur_x) * scale_x, (start_y - cur_y) * scale_y


# ---------------------------- Gradient ---------------------------- #
# Corner fractions (x, y) of the gradient start and end. The start is always
# the logo's corner, the end the opposite corner.
_GRADIENT_AXES: Dict[LogoPosition, Tuple[Tuple[int, int], Tuple[int, int]]] = {
    LogoPosition.TOP_LEFT: ((0, 0), (1, 1)),
    LogoPosition.TOP_RIGHT: ((1, 0), (0, 1)),
    LogoPosition.BOTTOM_LEFT: ((0, 1), (1, 0)),
    LogoPosition.BOTTOM_RIGHT: ((1, 1), (0, 0)),
}


def gradient_axis(
    position: LogoPosition, frame_w: float, frame_h: float
) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    (sx, sy), (ex, ey) = _GRADIENT_AXES[LogoPosition(position)]
    return (sx * frame_w, sy * frame_h), (ex * frame_w, ey * frame_h)


def gradient_alpha(t, stops: Sequence[Tuple[float, float]] = GRADIENT_STOPS):
    """Alpha of the overlay at position ``t`` along the gradient axis.

    Stops are interpolated linearly; positions before the first or after the
    last stop take that stop's alpha. Accepts scalars or numpy arrays.
    """
    positions = [p for p, _ in stops]
    alphas = [a for _, a in stops]
    result = np.interp(t, positions, alphas)
    if np.ndim(result) == 0:
        return float(result)
    return result
