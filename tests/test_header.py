from __future__ import annotations

import pytest

from lens_shading.decode import (
    BayerOrder,
    BufferUnderrunError,
    RawCapture,
    UnsupportedFormatError,
    open_capture,
    parse,
    resolve_black_level,
)


def test_parse_raw10_header_fields(make_capture) -> None:
    buf = make_capture(3280, 4, bits=10, bayer_order=2, transform=3, padding_right=16)
    header = parse(open_capture(buf))

    assert header.model == "imx219"
    assert header.width == 3280
    assert header.height == 4
    assert header.padding_right == 16
    assert header.transform == 3
    assert header.bayer_order is BayerOrder.BGGR
    assert header.bits_per_sample == 10
    assert header.max_value == 1023
    assert header.plane_width == 1640
    assert header.plane_height == 2


def test_parse_raw12_header(make_capture) -> None:
    header = parse(open_capture(make_capture(16, 4, bits=12, model=b"imx477")))
    assert header.bits_per_sample == 12
    assert header.max_value == 4095
    assert header.model == "imx477"


def test_parse_rejects_non_bayer_format(make_capture) -> None:
    buf = make_capture(16, 4, image_format=20)
    with pytest.raises(UnsupportedFormatError):
        parse(open_capture(buf))


@pytest.mark.parametrize("bayer_format", [0, 2, 5])
def test_parse_rejects_unsupported_bit_depth(make_capture, bayer_format: int) -> None:
    buf = make_capture(16, 4, bayer_format=bayer_format)
    with pytest.raises(UnsupportedFormatError):
        parse(open_capture(buf))


def test_parse_rejects_unknown_bayer_order(make_capture) -> None:
    buf = make_capture(16, 4, bayer_order=7)
    with pytest.raises(UnsupportedFormatError):
        parse(open_capture(buf))


def test_parse_truncated_header_is_underrun() -> None:
    with pytest.raises(BufferUnderrunError):
        parse(RawCapture(buffer=b"BRCM" + b"\x00" * 100, offset=0))


def test_resolve_black_level_table() -> None:
    assert resolve_black_level("imx219") == 64
    assert resolve_black_level("ov5647") == 16
    assert resolve_black_level("imx477") == 257
    assert resolve_black_level("testc") == 257
    assert resolve_black_level("unknown") == 16


def test_resolve_black_level_override_wins() -> None:
    assert resolve_black_level("imx219", 80) == 80
    assert resolve_black_level("imx219", 0) == 64
