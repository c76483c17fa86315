"""Tests for format detection via magic bytes and the file type guesser."""

import pytest

from exceptions import UnrecognizedFormatError
from utils.format_detect import ImageFormat, _is_svg_content, detect_format, guess_type

# --- detect_format ---


def test_detect_png(sample_png):
    assert detect_format(sample_png) == ImageFormat.PNG


def test_detect_jpeg(sample_jpeg):
    assert detect_format(sample_jpeg) == ImageFormat.JPEG


def test_detect_gif(sample_gif):
    assert detect_format(sample_gif) == ImageFormat.GIF


def test_detect_svg(sample_svg):
    assert detect_format(sample_svg) == ImageFormat.SVG


def test_detect_svg_with_bom_and_whitespace():
    assert detect_format(b"\xef\xbb\xbf  \n<svg xmlns='x'></svg>") == ImageFormat.SVG


def test_detect_too_small():
    with pytest.raises(UnrecognizedFormatError):
        detect_format(b"\x89P")


def test_detect_unknown():
    with pytest.raises(UnrecognizedFormatError) as exc_info:
        detect_format(b"RIFF\x00\x00\x00\x00WEBPVP8 ")
    assert "detected_bytes" in exc_info.value.details


def test_is_svg_content_rejects_html():
    assert not _is_svg_content(b"<html><body></body></html>")


# --- guess_type ---


def test_guess_type_prefers_content(tmp_path, sample_png):
    path = tmp_path / "misnamed.jpg"
    path.write_bytes(sample_png)
    assert guess_type(str(path)) == ImageFormat.PNG


@pytest.mark.parametrize(
    "name,expected",
    [
        ("a.png", ImageFormat.PNG),
        ("a.JPG", ImageFormat.JPEG),
        ("a.jpeg", ImageFormat.JPEG),
        ("a.gif", ImageFormat.GIF),
        ("a.svg", ImageFormat.SVG),
    ],
)
def test_guess_type_falls_back_to_extension(tmp_path, name, expected):
    path = tmp_path / name
    path.write_bytes(b"not really an image")
    assert guess_type(str(path)) == expected


def test_guess_type_unknown(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_bytes(b"plain text file")
    with pytest.raises(UnrecognizedFormatError):
        guess_type(str(path))


def test_guess_type_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        guess_type(str(tmp_path / "missing.png"))
