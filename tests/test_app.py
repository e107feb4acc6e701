import pytest

pytest.importorskip("streamlit_drawable_canvas")

from cropmark.app import counter_text, download_label, line_endpoints, preview_size  # noqa: E402
from cropmark.batch import EditorSession  # noqa: E402
from cropmark.export import ExportResult  # noqa: E402


def test_line_endpoints_centre_origin():
    obj = {
        "type": "line",
        "left": 100,
        "top": 50,
        "originX": "center",
        "originY": "center",
        "x1": -20,
        "y1": -5,
        "x2": 20,
        "y2": 5,
    }
    assert line_endpoints(obj) == ((80, 45), (120, 55))


def test_line_endpoints_left_origin():
    obj = {"type": "line", "left": 80, "top": 45, "width": 40, "height": 10, "x1": 20, "y1": 5, "x2": -20, "y2": -5}
    assert line_endpoints(obj) == ((120, 55), (80, 45))


def test_non_line_objects_are_ignored():
    assert line_endpoints({"type": "rect"}) is None


def test_preview_keeps_frame_aspect():
    assert preview_size((1080, 1350), height=675) == (540, 675)
    assert preview_size((0, 0)) == (0, 0)


def test_counter_follows_selection(two_files):
    editor = EditorSession(crop_size=(108, 135))
    assert counter_text(editor) == ""
    editor.load_batch(two_files)
    assert counter_text(editor) == "Image 1 of 2"
    editor.next()
    assert counter_text(editor) == "Image 2 of 2"


def test_download_label_names_the_output():
    single = ExportResult(name="a-watermarked.png", data=b"", mime="image/png")
    archive = ExportResult(
        name="images.zip", data=b"", mime="application/zip", entries=["a.png", "b.png"]
    )
    assert download_label(single) == "Download a-watermarked.png"
    assert download_label(archive) == "Download images.zip (2 images)"
