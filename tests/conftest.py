from __future__ import annotations

import numpy as np
import pytest

from lens_shading.decode.bayer import PIXEL_DATA_OFFSET
from lens_shading.decode.header import BRCM_FORMAT_BAYER, HEADER_OFFSET, HEADER_STRUCT, MODEL_OFFSET


def _stride(width: int, padding_right: int, bits: int) -> int:
    multiplier = 5 if bits == 10 else 6
    return (((((width + padding_right) * multiplier) + 3) >> 2) + 31) & ~31


def pack_raw10(samples: np.ndarray) -> np.ndarray:
    s = samples.astype(np.uint16).reshape(samples.shape[0], -1, 4)
    out = np.zeros(s.shape[:2] + (5,), dtype=np.uint8)
    out[..., :4] = (s >> 2).astype(np.uint8)
    lsb = np.zeros(s.shape[:2], dtype=np.uint16)
    for i, shift in enumerate((6, 4, 2, 0)):
        lsb |= (s[..., i] & 0x03) << shift
    out[..., 4] = lsb.astype(np.uint8)
    return out.reshape(samples.shape[0], -1)


def pack_raw12(samples: np.ndarray) -> np.ndarray:
    s = samples.astype(np.uint16).reshape(samples.shape[0], -1, 2, 2)
    out = np.zeros(s.shape[:3] + (3,), dtype=np.uint8)
    out[..., 0] = (s[..., 0] >> 4).astype(np.uint8)
    out[..., 1] = (s[..., 1] >> 4).astype(np.uint8)
    out[..., 2] = (((s[..., 0] & 0x0F) << 4) | (s[..., 1] & 0x0F)).astype(np.uint8)
    return out.reshape(samples.shape[0], -1)


def build_capture(
    width: int,
    height: int,
    samples: np.ndarray | None = None,
    bits: int = 10,
    bayer_order: int = 0,
    model: bytes = b"imx219",
    transform: int = 0,
    padding_right: int = 0,
    image_format: int = BRCM_FORMAT_BAYER,
    bayer_format: int | None = None,
) -> bytearray:
    """Build a BRCM raw block; ``samples`` is the height x width mosaic of raw values."""

    stride = _stride(width, padding_right, bits)
    buf = bytearray(PIXEL_DATA_OFFSET + height * stride)
    buf[0:4] = b"BRCM"
    buf[MODEL_OFFSET : MODEL_OFFSET + len(model)] = model
    HEADER_STRUCT.pack_into(
        buf,
        HEADER_OFFSET,
        model.ljust(32, b"\x00"),
        width,
        height,
        padding_right,
        0,
        0,
        0,
        0,
        0,
        0,
        0,
        transform,
        image_format,
        bayer_order,
        bayer_format if bayer_format is not None else (bits - 4) // 2,
    )

    if samples is not None:
        # the last cluster of a row is zero filled past the image width
        pad = -samples.shape[1] % 4
        padded = np.pad(samples, ((0, 0), (0, pad)))
        packed = pack_raw10(padded) if bits == 10 else pack_raw12(padded)
        for y in range(height):
            start = PIXEL_DATA_OFFSET + y * stride
            buf[start : start + packed.shape[1]] = packed[y].tobytes()
    return buf


@pytest.fixture
def make_capture():
    return build_capture


@pytest.fixture
def pack10():
    return pack_raw10
