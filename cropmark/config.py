"""Fixed output geometry, logo placement and naming constants."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

# ---------------------------- Configuration ---------------------------- #
CROP_WIDTH = 1080
CROP_HEIGHT = 1350
LOGO_PATH = Path(__file__).parent / "assets" / "logo.png"
LOGO_SIZE = 0.05  # logo height as a fraction of frame height
LOGO_MARGIN = 1.0  # margin around the logo as a fraction of logo height
FILE_NAME_SUFFIX = "-watermarked"  # set to "" to disable
ARCHIVE_NAME = "images.zip"
OUTPUT_EXT = ".png"
SUPPORTED_IMPORT_EXTS = {".jpg", ".jpeg", ".png", ".bmp", ".tif", ".tiff", ".webp"}

GRADIENT_RGB = (0, 0, 0)
# (position, alpha) pairs along the gradient axis
GRADIENT_STOPS = ((0.0, 0.4), (0.1, 0.4), (1.0, 0.0))


class LogoPosition(str, Enum):
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"

    @property
    def is_left(self) -> bool:
        return self in (LogoPosition.TOP_LEFT, LogoPosition.BOTTOM_LEFT)

    @property
    def is_top(self) -> bool:
        return self in (LogoPosition.TOP_LEFT, LogoPosition.TOP_RIGHT)

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").title()


DEFAULT_SETTINGS = {
    "keep_original": False,
    "add_gradient": False,
    "logo_position": LogoPosition.TOP_RIGHT,
}
