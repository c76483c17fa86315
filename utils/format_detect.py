import os
from enum import Enum

from exceptions import UnrecognizedFormatError


class ImageFormat(str, Enum):
    GIF = "gif"
    PNG = "png"
    JPEG = "jpeg"
    SVG = "svg"


# MIME type mapping
MIME_TYPES = {
    ImageFormat.GIF: "image/gif",
    ImageFormat.PNG: "image/png",
    ImageFormat.JPEG: "image/jpeg",
    ImageFormat.SVG: "image/svg+xml",
}

# Fallback when magic bytes are inconclusive
EXTENSIONS = {
    ".gif": ImageFormat.GIF,
    ".png": ImageFormat.PNG,
    ".jpg": ImageFormat.JPEG,
    ".jpeg": ImageFormat.JPEG,
    ".svg": ImageFormat.SVG,
}

# Enough for every signature plus an SVG prolog with leading whitespace
SNIFF_BYTES = 512


def detect_format(data: bytes) -> ImageFormat:
    """Detect image format from magic bytes.

    Args:
        data: Leading bytes of the file (at least the first 8 for
            binary formats).

    Returns:
        ImageFormat enum value.

    Raises:
        UnrecognizedFormatError: If no known format matches.
    """
    if len(data) < 4:
        raise UnrecognizedFormatError("File too small to identify format")

    # PNG: \x89PNG\r\n\x1a\n
    if data[:8] == b"\x89PNG\r\n\x1a\n":
        return ImageFormat.PNG

    # JPEG: \xFF\xD8\xFF
    if data[:3] == b"\xff\xd8\xff":
        return ImageFormat.JPEG

    # GIF: GIF87a or GIF89a
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return ImageFormat.GIF

    if _is_svg_content(data):
        return ImageFormat.SVG

    raise UnrecognizedFormatError(
        "Unrecognized file format",
        detected_bytes=data[:16].hex(),
    )


def guess_type(path: str) -> ImageFormat:
    """Classify the file at `path`.

    Magic bytes win; the file extension is only consulted when the
    content does not match any known signature.

    Raises:
        UnrecognizedFormatError: If neither content nor extension match.
        OSError: If the file cannot be read.
    """
    with open(path, "rb") as f:
        head = f.read(SNIFF_BYTES)

    try:
        return detect_format(head)
    except UnrecognizedFormatError:
        ext = os.path.splitext(path)[1].lower()
        if ext in EXTENSIONS:
            return EXTENSIONS[ext]
        raise UnrecognizedFormatError(
            f"Cannot determine image type of {path}",
            path=path,
            detected_bytes=head[:16].hex(),
        )


def _is_svg_content(data: bytes) -> bool:
    """Check if data looks like SVG content.

    Strips BOM and leading whitespace, then checks for <?xml or <svg.
    """
    text = data
    if text[:3] == b"\xef\xbb\xbf":
        text = text[3:]

    lower = text.lstrip()[:256].lower()
    return lower.startswith(b"<?xml") or lower.startswith(b"<svg")
