import zipfile

from PIL import Image
from typer.testing import CliRunner

from cropmark.cli import app, collect_image_files

runner = CliRunner()


def make_photos(directory, sizes):
    directory.mkdir(parents=True, exist_ok=True)
    paths = []
    for i, size in enumerate(sizes):
        path = directory / f"photo{i}.png"
        Image.new("RGB", size, (90, 120, 150)).save(path)
        paths.append(path)
    return paths


def test_single_file_writes_png(tmp_path):
    (photo,) = make_photos(tmp_path / "in", [(300, 200)])
    out = tmp_path / "out"
    result = runner.invoke(app, [str(photo), "-o", str(out), "--gradient", "-p", "bottom-left"])
    assert result.exit_code == 0, result.output
    written = out / "photo0-watermarked.png"
    assert Image.open(written).size == (1080, 1350)


def test_directory_writes_zip(tmp_path):
    make_photos(tmp_path / "in", [(300, 200), (200, 300)])
    (tmp_path / "in" / "notes.txt").write_text("not a photo")
    out = tmp_path / "out"
    result = runner.invoke(app, [str(tmp_path / "in"), "-o", str(out), "--no-logo"])
    assert result.exit_code == 0, result.output
    with zipfile.ZipFile(out / "images.zip") as zf:
        assert zf.namelist() == ["photo0-watermarked.png", "photo1-watermarked.png"]


def test_keep_original_keeps_size(tmp_path):
    (photo,) = make_photos(tmp_path / "in", [(320, 240)])
    out = tmp_path / "out"
    result = runner.invoke(app, [str(photo), "-o", str(out), "--keep-original"])
    assert result.exit_code == 0, result.output
    assert Image.open(out / "photo0-watermarked.png").size == (320, 240)


def test_no_images_exits_with_error(tmp_path):
    (tmp_path / "empty").mkdir()
    result = runner.invoke(app, [str(tmp_path / "empty")])
    assert result.exit_code == 1


def test_unreadable_image_exits_with_error(tmp_path):
    bad = tmp_path / "bad.jpg"
    bad.write_bytes(b"junk")
    result = runner.invoke(app, [str(bad), "-o", str(tmp_path / "out")])
    assert result.exit_code == 1
    assert "Skipping bad.jpg" in result.output


def test_collect_keeps_argument_order(tmp_path):
    photos = make_photos(tmp_path / "in", [(10, 10), (10, 10)])
    assert collect_image_files([photos[1], photos[0]]) == [photos[1], photos[0]]


def test_summary_names_single_png(tmp_path):
    (photo,) = make_photos(tmp_path / "in", [(300, 200)])
    result = runner.invoke(app, [str(photo), "-o", str(tmp_path / "out")])
    assert result.exit_code == 0, result.output
    assert "Exported: photo0-watermarked.png" in result.output


def test_summary_counts_archive_entries(tmp_path):
    make_photos(tmp_path / "in", [(300, 200), (200, 300)])
    result = runner.invoke(app, [str(tmp_path / "in"), "-o", str(tmp_path / "out")])
    assert result.exit_code == 0, result.output
    assert "Exported: 2 image(s) into images.zip" in result.output


def test_default_logo_is_a_mark_not_a_block(tmp_path):
    photo = tmp_path / "grey.png"
    Image.new("RGB", (300, 200), (128, 128, 128)).save(photo)
    out = tmp_path / "out"
    result = runner.invoke(app, [str(photo), "-o", str(out)])
    assert result.exit_code == 0, result.output
    frame = Image.open(out / "grey-watermarked.png").convert("RGB")
    # bundled logo is 68x68 at (945, 68) in the top-right corner
    centre = frame.getpixel((979, 102))
    assert min(centre) > 200
    # the gap between the disc and the ring, and the box corner, show the photo
    for xy in [(996, 102), (946, 69)]:
        assert all(abs(c - 128) <= 4 for c in frame.getpixel(xy)), xy
    # outside the logo box nothing is drawn
    assert all(abs(c - 128) <= 1 for c in frame.getpixel((900, 102)))
