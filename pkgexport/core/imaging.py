# ==============================================================================
# IMAGE ENCODING
# ==============================================================================
# Encodes decoded texture frames for writing.
#
#   - Floating point images (Pillow mode "F") are HDR and are written as
#     Radiance .hdr (flat RGBE scanlines)
#   - Everything else is written as PNG through Pillow
#
# Usage:
#   data, ext = encode_image(image)   # ext is "png" or "hdr"
# ==============================================================================

import io
import math
from array import array
from functools import lru_cache
from typing import Tuple

from PIL import Image

HDR_MODES = ("F",)

# Modes Pillow can write to PNG directly
PNG_MODES = ("1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA")


# Largest value an RGBE pixel can hold (mantissa byte 255, exponent byte 255)
RGBE_MAX = math.ldexp(255 / 256, 127)


@lru_cache(maxsize=65536)
def _to_rgbe(value: float) -> bytes:
    """Encode one grey float sample as an RGBE pixel."""
    if not value > 1e-32:
        return b"\x00\x00\x00\x00"
    mantissa, exponent = math.frexp(min(value, RGBE_MAX))
    scaled = min(255, int(mantissa * 256.0))
    return bytes((scaled, scaled, scaled, exponent + 128))


def encode_radiance_hdr(image: Image.Image) -> bytes:
    """
    Encode a single-channel float image as a Radiance HDR file.

    Args:
        image: Pillow image in mode "F"

    Returns:
        Complete .hdr file contents
    """
    width, height = image.size
    header = (
        "#?RADIANCE\n"
        "FORMAT=32-bit_rle_rgbe\n"
        "\n"
        f"-Y {height} +X {width}\n"
    ).encode("ascii")

    # Raw "F" data is native-endian float32, row by row from the top
    samples = array('f')
    samples.frombytes(image.tobytes())
    return header + b"".join(map(_to_rgbe, samples))


def encode_image(image: Image.Image) -> Tuple[bytes, str]:
    """
    Encode a decoded texture frame.

    Args:
        image: Pillow image

    Returns:
        Tuple of (file contents, extension without the dot)
    """
    if image.mode in HDR_MODES:
        return encode_radiance_hdr(image), "hdr"

    if image.mode not in PNG_MODES:
        image = image.convert("RGBA" if "A" in image.getbands() else "RGB")

    buffer = io.BytesIO()
    image.save(buffer, "PNG")
    return buffer.getvalue(), "png"
