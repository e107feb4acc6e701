# Batch photo cropper: cover-fit to a fixed frame, corner gradient, logo stamp
# and PNG / zip export.

from .batch import EditorSession, LoadedImage, SettingsSnapshot
from .compose import LogoAsset, RenderSurface, render
from .config import LogoPosition
from .export import ExportResult, export_all, output_name, save_output
from .settings import ImageSettings

__all__ = [
    "EditorSession",
    "LoadedImage",
    "SettingsSnapshot",
    "LogoAsset",
    "RenderSurface",
    "render",
    "LogoPosition",
    "ExportResult",
    "export_all",
    "output_name",
    "save_output",
    "ImageSettings",
]
