"""Editing session: the loaded batch, the current selection and commands.

All state lives on an :class:`EditorSession`; front ends call its command
methods and redraw from ``session.surface`` whenever ``on_render`` fires.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Iterable, List, Mapping, Optional, Tuple

from PIL import Image

from cropmark.compose import LogoAsset, RenderSurface, render
from cropmark.config import CROP_HEIGHT, CROP_WIDTH, LogoPosition
from cropmark.geometry import drag_delta
from cropmark.imaging import DecodeError, decode_image
from cropmark.settings import (
    ImageSettings,
    apply_policy,
    begin_drag,
    create_settings,
    set_gradient,
    set_keep_original,
    set_logo_position,
    set_offset,
)

logger = logging.getLogger(__name__)


@dataclass
class LoadedImage:
    """One uploaded file. ``image``/``settings`` stay ``None`` until decoded;
    a slot whose decode failed keeps ``error`` and is skipped everywhere."""

    name: str
    image: Optional[Image.Image] = None
    settings: Optional[ImageSettings] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.image is not None and self.settings is not None

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size if self.image is not None else (0, 0)


@dataclass(frozen=True)
class SettingsSnapshot:
    """What the controls should show for the selected image."""

    index: int
    count: int
    name: str
    keep_original: bool
    add_gradient: bool
    logo_position: LogoPosition

    @property
    def counter_label(self) -> str:
        return f"Image {self.index + 1} of {self.count}"


def selection_label(names: List[str]) -> str:
    if not names:
        return ""
    if len(names) == 1:
        return names[0]
    return f"{len(names)} images selected"


class EditorSession:
    def __init__(
        self,
        logo: Optional[LogoAsset] = None,
        crop_size: Tuple[int, int] = (CROP_WIDTH, CROP_HEIGHT),
        defaults: Optional[Mapping] = None,
        on_render: Optional[Callable[[RenderSurface], None]] = None,
        max_workers: int = 4,
    ) -> None:
        self.logo = logo
        self.crop_size = crop_size
        self.defaults = dict(defaults or {})
        self.on_render = on_render
        self.max_workers = max_workers
        self.surface = RenderSurface()
        self.images: List[LoadedImage] = []
        self.current_index = 0
        self._drag: Optional[Tuple[float, float, Tuple[float, float]]] = None

    # ---- Batch ----
    def load_batch(self, files: Iterable[Tuple[str, bytes]]) -> List[LoadedImage]:
        """Replace the batch with ``files`` (name, data) in the given order.

        Files decode concurrently; a slot's settings are created when its
        decode finishes. The first image is shown only once every slot has
        finished, successfully or not.
        """
        files = list(files)
        self.images = [LoadedImage(name=name) for name, _ in files]
        self.current_index = 0
        self._drag = None
        if not files:
            return self.images

        with ThreadPoolExecutor(max_workers=max(1, min(self.max_workers, len(files)))) as executor:
            futures = {
                executor.submit(decode_image, data, name): idx
                for idx, (name, data) in enumerate(files)
            }
            for future in as_completed(futures):
                slot = self.images[futures[future]]
                try:
                    slot.image = future.result()
                except DecodeError as e:
                    logger.warning("Failed to decode %s: %s", slot.name, e)
                    slot.error = str(e)
                    continue
                slot.settings = create_settings(slot.image.size, self.defaults, self.crop_size)

        loaded = sum(1 for img in self.images if img.ok)
        logger.info("Loaded %d of %d images", loaded, len(self.images))
        self.select(0)
        return self.images

    @property
    def current(self) -> Optional[LoadedImage]:
        if 0 <= self.current_index < len(self.images):
            return self.images[self.current_index]
        return None

    def _current_settings(self) -> Optional[ImageSettings]:
        cur = self.current
        return cur.settings if cur is not None and cur.ok else None

    # ---- Navigation ----
    def select(self, index: int) -> bool:
        if not 0 <= index < len(self.images):
            logger.debug("Ignoring selection of %s in batch of %d", index, len(self.images))
            return False
        self.current_index = index
        self._drag = None
        self.request_render()
        return True

    def next(self) -> bool:
        if not self.images:
            return False
        return self.select((self.current_index + 1) % len(self.images))

    def prev(self) -> bool:
        if not self.images:
            return False
        return self.select((self.current_index - 1 + len(self.images)) % len(self.images))

    def snapshot(self) -> Optional[SettingsSnapshot]:
        cur = self.current
        if cur is None or not cur.ok:
            return None
        s = cur.settings
        return SettingsSnapshot(
            index=self.current_index,
            count=len(self.images),
            name=cur.name,
            keep_original=s.keep_original,
            add_gradient=s.add_gradient,
            logo_position=s.logo_position,
        )

    # ---- Rendering ----
    def request_render(self) -> bool:
        """Render the selected image into the shared surface."""
        cur = self.current
        if cur is None or not cur.ok:
            return False
        render(self.surface, cur.image, cur.settings, self.logo, self.crop_size)
        if self.on_render is not None:
            self.on_render(self.surface)
        return True

    def load_logo(self) -> None:
        if self.logo is not None and not self.logo.complete:
            self.logo.load()
            self.logo_loaded()

    def set_logo(self, logo: Optional[LogoAsset]) -> None:
        """Stamp ``logo`` from now on; ``None`` turns the logo off."""
        self.logo = logo
        if logo is not None and not logo.complete:
            logo.load()
        self.logo_loaded()

    def logo_loaded(self) -> None:
        # the one re-render owed to a logo that finished after the first render
        if self.images:
            self.request_render()

    # ---- Commands on the selected image ----
    def set_keep_original(self, value: bool) -> None:
        settings = self._current_settings()
        if settings is None:
            return
        set_keep_original(settings, self.current.size, value, self.crop_size)
        self._drag = None
        self.request_render()

    def set_gradient(self, value: bool) -> None:
        settings = self._current_settings()
        if settings is None:
            return
        set_gradient(settings, value)
        self.request_render()

    def set_logo_position(self, position: LogoPosition) -> None:
        settings = self._current_settings()
        if settings is None:
            return
        set_logo_position(settings, position)
        self.request_render()

    def apply_current_to_all(self) -> None:
        """Give every other image the selected image's choices.

        Geometry is re-derived per image from its own size, never copied.
        """
        settings = self._current_settings()
        if settings is None:
            return
        policy = settings.policy()
        for idx, img in enumerate(self.images):
            if idx == self.current_index or not img.ok:
                continue
            apply_policy(img.settings, policy, img.size, self.crop_size)
        self.request_render()

    # ---- Panning ----
    def begin_pan(self, pointer_x: float, pointer_y: float) -> bool:
        settings = self._current_settings()
        if settings is None or settings.keep_original:
            return False
        self._drag = (pointer_x, pointer_y, begin_drag(settings))
        return True

    def pan(self, pointer_x: float, pointer_y: float, scale_x: float = 1.0, scale_y: float = 1.0) -> None:
        """Follow the pointer; ``scale_*`` converts screen pixels to frame pixels."""
        settings = self._current_settings()
        if self._drag is None or settings is None or settings.keep_original:
            return
        start_x, start_y, start_offset = self._drag
        dx, dy = drag_delta(start_x, start_y, pointer_x, pointer_y, scale_x, scale_y)
        set_offset(settings, dx, dy, start_offset)
        self.request_render()

    def end_pan(self) -> None:
        self._drag = None

    def pan_stroke(
        self,
        start: Tuple[float, float],
        end: Tuple[float, float],
        scale_x: float = 1.0,
        scale_y: float = 1.0,
    ) -> None:
        """A complete drag from ``start`` to ``end``."""
        if self.begin_pan(*start):
            self.pan(*end, scale_x=scale_x, scale_y=scale_y)
            self.end_pan()
