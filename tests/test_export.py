import io
import zipfile

import pytest
from PIL import Image

from cropmark.batch import EditorSession
from cropmark.compose import RenderSurface
from cropmark.export import export_all, output_name, save_output
from cropmark.imaging import EncodeError

from .conftest import png_bytes

CROP = (108, 135)


@pytest.mark.parametrize(
    "name,expected",
    [
        ("photo.jpg", "photo-watermarked.png"),
        ("holiday.final.JPEG", "holiday.final-watermarked.png"),
        ("scan", "scan-watermarked.png"),
    ],
)
def test_output_name(name, expected):
    assert output_name(name) == expected


def test_output_name_custom_suffix():
    assert output_name("photo.jpg", "") == "photo.png"


def test_single_image_exports_one_png():
    s = EditorSession(crop_size=CROP)
    s.load_batch([("photo.jpg", png_bytes((300, 200)))])
    result = export_all(s)
    assert result.name == "photo-watermarked.png"
    assert result.mime == "image/png"
    assert not result.is_archive
    assert Image.open(io.BytesIO(result.data)).size == CROP


def test_single_undecodable_image_exports_nothing():
    s = EditorSession(crop_size=CROP)
    s.load_batch([("photo.jpg", b"junk")])
    assert export_all(s) is None


def test_empty_session_exports_nothing():
    assert export_all(EditorSession(crop_size=CROP)) is None


def test_batch_exports_zip_and_restores_selection():
    s = EditorSession(crop_size=CROP)
    s.load_batch(
        [
            ("a.jpg", png_bytes((300, 200))),
            ("b.png", png_bytes((100, 400))),
            ("c.webp", png_bytes((50, 50))),
        ]
    )
    s.select(1)
    s.set_keep_original(True)
    result = export_all(s)

    assert result.name == "images.zip"
    assert result.is_archive
    assert s.current_index == 1
    assert s.surface.size == (100, 400)
    with zipfile.ZipFile(io.BytesIO(result.data)) as zf:
        assert zf.namelist() == [
            "a-watermarked.png",
            "b-watermarked.png",
            "c-watermarked.png",
        ]
        sizes = [Image.open(io.BytesIO(zf.read(n))).size for n in zf.namelist()]
    assert sizes == [CROP, (100, 400), CROP]


def test_batch_skips_undecodable_images():
    s = EditorSession(crop_size=CROP)
    s.load_batch([("a.jpg", png_bytes((30, 30))), ("broken.jpg", b"junk")])
    result = export_all(s)
    assert result.entries == ["a-watermarked.png"]
    assert result.skipped == ["broken.jpg"]


def test_duplicate_names_get_distinct_entries():
    s = EditorSession(crop_size=CROP)
    s.load_batch([("a.jpg", png_bytes((30, 30))), ("a.png", png_bytes((30, 30)))])
    result = export_all(s)
    assert result.entries == ["a-watermarked.png", "a-watermarked (2).png"]


def test_encode_failure_aborts_only_that_image(monkeypatch):
    s = EditorSession(crop_size=CROP)
    s.load_batch([("a.jpg", png_bytes((30, 30))), ("b.jpg", png_bytes((40, 40)))])
    real_to_png = RenderSurface.to_png
    calls = []

    def flaky_to_png(self):
        calls.append(1)
        if len(calls) == 1:
            raise EncodeError("disk on fire")
        return real_to_png(self)

    monkeypatch.setattr(RenderSurface, "to_png", flaky_to_png)
    result = export_all(s)
    assert result.failed == ["a.jpg"]
    assert result.entries == ["b-watermarked.png"]


def test_save_output_writes_file(tmp_path):
    s = EditorSession(crop_size=CROP)
    s.load_batch([("photo.jpg", png_bytes((30, 30)))])
    path = save_output(export_all(s), tmp_path / "out")
    assert path == tmp_path / "out" / "photo-watermarked.png"
    assert path.read_bytes().startswith(b"\x89PNG")
