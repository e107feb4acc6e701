import io

import pytest
from PIL import Image

from cropmark.compose import LogoAsset, RenderSurface, render


def png_bytes(size, color=(200, 200, 200, 255)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", size, color).save(buf, format="PNG")
    return buf.getvalue()


def split_image(size, left=(255, 0, 0, 255), right=(0, 0, 255, 255)) -> Image.Image:
    """Left half one colour, right half another."""
    w, h = size
    img = Image.new("RGBA", size, right)
    img.paste(Image.new("RGBA", (w // 2, h), left), (0, 0))
    return img


def render_frame(image, settings, logo=None, crop_size=(108, 135)) -> Image.Image:
    """Render onto a fresh surface and return the finished frame."""
    surface = RenderSurface()
    render(surface, image, settings, logo, crop_size)
    return surface.image


@pytest.fixture
def red_logo():
    return LogoAsset.from_image(Image.new("RGBA", (20, 10), (255, 0, 0, 255)))


@pytest.fixture
def two_files():
    return [("wide.jpg", png_bytes((200, 100))), ("tall.png", png_bytes((80, 160)))]
