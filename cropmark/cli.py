#!/usr/bin/env python3
"""
cropmark - crop photos to a fixed frame, stamp the logo and export PNGs
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

import typer

from cropmark.batch import EditorSession
from cropmark.compose import LogoAsset
from cropmark.config import LOGO_PATH, SUPPORTED_IMPORT_EXTS, LogoPosition
from cropmark.export import export_all, save_output

app = typer.Typer(add_completion=False)


def collect_image_files(paths: List[Path]) -> List[Path]:
    """Expand directories into their image files, keeping the given order."""
    image_files: List[Path] = []
    for path in paths:
        if path.is_dir():
            image_files.extend(
                sorted(
                    p
                    for p in path.iterdir()
                    if p.is_file() and p.suffix.lower() in SUPPORTED_IMPORT_EXTS
                )
            )
        elif path.is_file():
            image_files.append(path)
        else:
            typer.echo(f"Error: '{path}' does not exist.", err=True)
    return image_files


def read_files(image_files: List[Path]) -> List[Tuple[str, bytes]]:
    files = []
    for image_file in image_files:
        try:
            files.append((image_file.name, image_file.read_bytes()))
        except OSError as e:
            typer.echo(f"Error reading image {image_file}: {e}", err=True)
    return files


@app.command()
def main(
    paths: List[Path] = typer.Argument(
        ..., help="Image files and/or directories containing images"
    ),
    output: Path = typer.Option(
        Path.cwd() / "watermarked_output",
        "--output",
        "-o",
        help="Directory the PNG or images.zip is written to",
    ),
    keep_original: bool = typer.Option(
        False, "--keep-original", help="Keep native size instead of cropping"
    ),
    gradient: bool = typer.Option(
        False, "--gradient", "-g", help="Darken the logo corner with a gradient"
    ),
    position: LogoPosition = typer.Option(
        LogoPosition.TOP_RIGHT, "--position", "-p", help="Logo corner"
    ),
    logo: Optional[Path] = typer.Option(
        LOGO_PATH, "--logo", "-l", help="Logo image file"
    ),
    no_logo: bool = typer.Option(False, "--no-logo", help="Do not stamp a logo"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """
    Crop each photo to the output frame, stamp the logo and export.

    A single photo is written as <name>-watermarked.png, several photos are
    packed into images.zip in the output directory.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    image_files = collect_image_files(paths)
    if not image_files:
        typer.echo("No image files found.", err=True)
        raise typer.Exit(1)

    files = read_files(image_files)
    typer.echo(f"Found {len(files)} image(s) to process...")

    logo_asset = None if no_logo or logo is None else LogoAsset(logo).load()
    session = EditorSession(
        logo=logo_asset,
        defaults={
            "keep_original": keep_original,
            "add_gradient": gradient,
            "logo_position": position,
        },
    )
    session.load_batch(files)
    for img in session.images:
        if not img.ok:
            typer.echo(f"  Skipping {img.name}: {img.error}")

    result = export_all(session)
    if result is None:
        typer.echo("Nothing could be exported.", err=True)
        raise typer.Exit(1)

    out_path = save_output(result, output)
    for name in result.failed:
        typer.echo(f"  Failed to export {name}")

    typer.echo("\n" + "=" * 50)
    if result.is_archive:
        typer.echo(f"Exported: {len(result.entries)} image(s) into {result.name}")
    else:
        typer.echo(f"Exported: {result.name}")
    typer.echo(f"Output saved to: {out_path}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
