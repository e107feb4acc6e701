"""Decode uploaded photos and encode finished frames."""

from __future__ import annotations

import io
import logging

import piexif
from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)


class DecodeError(ValueError):
    """The bytes could not be read as an image."""


class EncodeError(RuntimeError):
    """A frame could not be written as PNG."""


def exif_orientation(img: Image.Image) -> int:
    raw = img.info.get("exif")
    if not raw:
        return 1
    try:
        exif_dict = piexif.load(raw)
        return int(exif_dict.get("0th", {}).get(piexif.ImageIFD.Orientation, 1))
    except Exception as e:
        logger.debug("Could not read EXIF orientation: %s", e)
        return 1


def decode_image(data: bytes, name: str = "<bytes>") -> Image.Image:
    """Decode ``data`` into an upright RGBA image.

    Raises:
        DecodeError: if the data is not a readable image.
    """
    try:
        img = Image.open(io.BytesIO(data))
        orientation = exif_orientation(img)
        if orientation != 1:
            logger.debug("Applying EXIF orientation %d to %s", orientation, name)
            img = ImageOps.exif_transpose(img)
        img = img.convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise DecodeError(f"Not a readable image: {name}") from exc
    return img


def encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    try:
        img.save(buf, format="PNG")
    except (OSError, ValueError) as exc:
        raise EncodeError(f"PNG encode failed: {exc}") from exc
    return buf.getvalue()
