from __future__ import annotations

import logging
import struct
from types import MappingProxyType

from .base import BufferUnderrunError, UnsupportedFormatError
from .types import BayerOrder, RawCapture, SensorHeader


logger = logging.getLogger(__name__)

# Offsets relative to the BRCM tag.
MODEL_OFFSET = 16
MODEL_LENGTH = 6
HEADER_OFFSET = 0xB0

# name[32], width, height, padding_right, padding_down, dummy[6],
# transform, format, bayer_order, bayer_format
HEADER_STRUCT = struct.Struct("<32s4H6I2H2B")

# vc_image_types.h
BRCM_FORMAT_BAYER = 33
BRCM_BAYER_RAW10 = 3
BRCM_BAYER_RAW12 = 4
SUPPORTED_BAYER_FORMATS = (BRCM_BAYER_RAW10, BRCM_BAYER_RAW12)

DEFAULT_BLACK_LEVEL = 16
BLACK_LEVELS = MappingProxyType(
    {
        "imx219": 64,
        "ov5647": 16,
        "imx477": 257,
        "testc": 257,
    }
)


def _decode_text(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("ascii", errors="replace")


def read_model(capture: RawCapture) -> str:
    start = capture.offset + MODEL_OFFSET
    if start + MODEL_LENGTH > capture.size:
        raise BufferUnderrunError("capture too short for sensor model field")
    return _decode_text(bytes(capture.buffer[start : start + MODEL_LENGTH]))


def parse(capture: RawCapture) -> SensorHeader:
    start = capture.offset + HEADER_OFFSET
    end = start + HEADER_STRUCT.size
    if end > capture.size:
        raise BufferUnderrunError(
            f"raw header needs bytes {start}..{end} but capture is {capture.size} bytes"
        )

    (
        name,
        width,
        height,
        padding_right,
        padding_down,
        *_dummy,
        transform,
        image_format,
        bayer_order,
        bayer_format,
    ) = HEADER_STRUCT.unpack_from(capture.buffer, start)

    logger.info(
        "header decoding: mode %s, width %s, height %s, padding %s %s",
        _decode_text(name),
        width,
        height,
        padding_right,
        padding_down,
    )
    logger.info(
        "transform %s, image format %s, bayer order %s, bayer format %s",
        transform,
        image_format,
        bayer_order,
        bayer_format,
    )

    if image_format != BRCM_FORMAT_BAYER or bayer_format not in SUPPORTED_BAYER_FORMATS:
        raise UnsupportedFormatError(
            f"raw file is not Bayer raw10 or raw12 (format={image_format}, bayer_format={bayer_format})"
        )
    try:
        order = BayerOrder(bayer_order)
    except ValueError as exc:
        raise UnsupportedFormatError(f"unknown bayer order {bayer_order}") from exc

    return SensorHeader(
        model=read_model(capture),
        width=width,
        height=height,
        padding_right=padding_right,
        padding_down=padding_down,
        transform=transform,
        image_format=image_format,
        bayer_order=order,
        bayer_format=bayer_format,
    )


def resolve_black_level(model: str, override: int = 0) -> int:
    """Black level to use for ``model``; a positive ``override`` always wins."""

    if override > 0:
        return override
    return BLACK_LEVELS.get(model[:MODEL_LENGTH], DEFAULT_BLACK_LEVEL)
