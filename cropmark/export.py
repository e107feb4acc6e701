"""Turn a whole session into downloadable PNG output.

One image exports as a single PNG; several go into one zip archive. Every
image is rendered through the session's shared surface, so the loop is
strictly sequential: select, render, encode, store, then the next one.
"""

from __future__ import annotations

import io
import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Set, Union

from cropmark.batch import EditorSession
from cropmark.config import ARCHIVE_NAME, FILE_NAME_SUFFIX, OUTPUT_EXT
from cropmark.imaging import EncodeError

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    name: str
    data: bytes
    mime: str
    entries: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)  # encode failures
    skipped: List[str] = field(default_factory=list)  # never decoded

    @property
    def is_archive(self) -> bool:
        return self.mime == "application/zip"


def output_name(file_name: str, suffix: str = FILE_NAME_SUFFIX) -> str:
    """``photo.jpg`` -> ``photo-watermarked.png``."""
    return f"{Path(file_name).stem}{suffix}{OUTPUT_EXT}"


def _unique(name: str, used: Set[str]) -> str:
    candidate, n = name, 2
    while candidate in used:
        stem = name[: -len(OUTPUT_EXT)]
        candidate = f"{stem} ({n}){OUTPUT_EXT}"
        n += 1
    used.add(candidate)
    return candidate


def export_single(session: EditorSession) -> Optional[ExportResult]:
    img = session.images[0]
    if not img.ok:
        logger.warning("Nothing to export: %s was not decoded", img.name)
        return None
    session.select(0)
    try:
        data = session.surface.to_png()
    except EncodeError as e:
        logger.error("Failed to export %s: %s", img.name, e)
        return None
    name = output_name(img.name)
    return ExportResult(name=name, data=data, mime="image/png", entries=[name])


def export_archive(session: EditorSession) -> Optional[ExportResult]:
    result = ExportResult(name=ARCHIVE_NAME, data=b"", mime="application/zip")
    last_index = session.current_index
    used: Set[str] = set()
    buf = io.BytesIO()
    try:
        with zipfile.ZipFile(buf, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
            for idx, img in enumerate(session.images):
                if not img.ok:
                    result.skipped.append(img.name)
                    continue
                session.select(idx)
                try:
                    data = session.surface.to_png()
                except EncodeError as e:
                    logger.error("Failed to export %s: %s", img.name, e)
                    result.failed.append(img.name)
                    continue
                entry = _unique(output_name(img.name), used)
                zf.writestr(entry, data)
                result.entries.append(entry)
    finally:
        session.select(last_index)
    if not result.entries:
        return None
    result.data = buf.getvalue()
    logger.info(
        "Exported %d images to %s (%d failed, %d skipped)",
        len(result.entries),
        ARCHIVE_NAME,
        len(result.failed),
        len(result.skipped),
    )
    return result


def export_all(session: EditorSession) -> Optional[ExportResult]:
    """Export every decoded image; ``None`` if nothing could be produced."""
    if not session.images:
        return None
    if len(session.images) == 1:
        return export_single(session)
    return export_archive(session)


def save_output(result: ExportResult, directory: Union[str, Path]) -> Path:
    out_dir = Path(directory).expanduser()
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / result.name
    out_path.write_bytes(result.data)
    return out_path
