from __future__ import annotations

import io
import json

from PIL import Image

from pkgexport.core.imaging import encode_image, encode_radiance_hdr
from pkgexport.core.serializer import JsonSerializer


def test_rgba_frame_is_png() -> None:
    data, ext = encode_image(Image.new("RGBA", (3, 2), (1, 2, 3, 4)))
    assert ext == "png"
    with Image.open(io.BytesIO(data)) as decoded:
        assert decoded.size == (3, 2)
        assert decoded.getpixel((0, 0)) == (1, 2, 3, 4)


def test_unsupported_mode_is_converted() -> None:
    data, ext = encode_image(Image.new("CMYK", (1, 1)))
    assert ext == "png"
    assert data.startswith(b"\x89PNG")


def test_float_frame_is_radiance_hdr() -> None:
    image = Image.new("F", (3, 2), 0.5)
    data, ext = encode_image(image)
    header = b"#?RADIANCE\nFORMAT=32-bit_rle_rgbe\n\n-Y 2 +X 3\n"
    assert ext == "hdr"
    assert data.startswith(header)
    assert len(data) == len(header) + 3 * 2 * 4
    # 0.5 = 0.5 * 2^0 -> mantissa byte 128, exponent byte 128
    assert data[len(header):len(header) + 4] == bytes((128, 128, 128, 128))


def test_black_hdr_pixels_are_zero() -> None:
    data = encode_radiance_hdr(Image.new("F", (1, 1), 0.0))
    assert data.endswith(b"\x00\x00\x00\x00")


def test_hdr_pixels_follow_row_order() -> None:
    image = Image.new("F", (2, 2), 0.0)
    image.putpixel((1, 0), 2.0)
    image.putpixel((0, 1), 0.5)
    data = encode_radiance_hdr(image)
    body = data[data.index(b"+X 2\n") + 5:]
    # 2.0 = 0.5 * 2^2 -> exponent byte 130
    assert body == (b"\x00\x00\x00\x00" + bytes((128, 128, 128, 130))
                    + bytes((128, 128, 128, 128)) + b"\x00\x00\x00\x00")


def test_hdr_clamps_values_out_of_range() -> None:
    image = Image.new("F", (2, 1), float("inf"))
    image.putpixel((1, 0), float("nan"))
    data = encode_radiance_hdr(image)
    assert data.endswith(bytes((255, 255, 255, 255)) + b"\x00\x00\x00\x00")


class _Export:
    def __init__(self) -> None:
        self.name = "BP_Door"
        self.class_name = "BlueprintGeneratedClass"
        self.outer = _Outer()
        self.properties = {"Hash": b"\x01\xff", "Tags": {"door"}}


class _Outer:
    name = "BP_Door.uasset"


def test_serializer_record_layout() -> None:
    records = json.loads(JsonSerializer().serialize([
        _Export(),
        {"name": "Row", "class_name": "DataTable", "properties": {"Count": 2}},
    ]).decode("utf-8"))

    assert records == [
        {"Name": "BP_Door", "Class": "BlueprintGeneratedClass", "Outer": "BP_Door.uasset",
         "Properties": {"Hash": "01ff", "Tags": ["door"]}},
        {"Name": "Row", "Class": "DataTable", "Outer": None, "Properties": {"Count": 2}},
    ]
    assert list(records[0]) == ["Name", "Class", "Outer", "Properties"]


def test_serializer_keeps_unicode() -> None:
    data = JsonSerializer(indent=None).serialize([{"name": "Épée"}])
    assert "Épée".encode("utf-8") in data
