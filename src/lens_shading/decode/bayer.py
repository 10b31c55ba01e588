from __future__ import annotations

import logging

import numpy as np
from numpy.lib.stride_tricks import as_strided

from .base import BufferUnderrunError
from .types import ChannelPlanes, RawCapture, SensorHeader


logger = logging.getLogger(__name__)

NUM_CHANNELS = 4

# Pixel data starts this far past the BRCM tag.
PIXEL_DATA_OFFSET = 32768

PIXELS_PER_CLUSTER = 4
CLUSTER_BYTES = {10: 5, 12: 6}

# First sample of a RAW10 cluster takes the top two bits of the fifth byte.
_RAW10_LSB_SHIFTS = np.array([6, 4, 2, 0], dtype=np.uint32)


def compute_stride(header: SensorHeader) -> int:
    """Scanline stride in bytes, rounded up to 32 as the firmware does."""

    multiplier = CLUSTER_BYTES[header.bits_per_sample]
    row_bytes = (((header.width + header.padding_right) * multiplier) + 3) >> 2
    return (row_bytes + 31) & ~31


def black_level_correct(raw: np.ndarray | int, black_level: int, max_value: int) -> np.ndarray:
    """Subtract ``black_level`` and rescale back to ``[0, max_value]``.

    Arithmetic is unsigned 32-bit and the result is truncated to 16 bits, so
    samples below the black level wrap rather than clip.
    """

    if black_level >= max_value:
        raise ValueError(f"black level {black_level} must be below max value {max_value}")

    samples = np.asarray(raw, dtype=np.uint32)
    with np.errstate(over="ignore"):
        scaled = (samples - np.uint32(black_level)) * np.uint32(max_value)
        corrected = scaled // np.uint32(max_value - black_level)
    return np.asarray(corrected).astype(np.uint16)


def _unpack_raw10(clusters: np.ndarray) -> np.ndarray:
    msb = clusters[..., :4].astype(np.uint32)
    lsb = clusters[..., 4:5].astype(np.uint32)
    return (msb << 2) | ((lsb >> _RAW10_LSB_SHIFTS) & 0x03)


def _unpack_raw12(clusters: np.ndarray) -> np.ndarray:
    pairs = clusters.reshape(clusters.shape[:-1] + (2, 3)).astype(np.uint32)
    first = (pairs[..., 0] << 4) | (pairs[..., 2] >> 4)
    second = (pairs[..., 1] << 4) | (pairs[..., 2] & 0x0F)
    return np.stack([first, second], axis=-1)


def _scanlines(capture: RawCapture, header: SensorHeader, rows: int, line_bytes: int) -> np.ndarray:
    stride = compute_stride(header)
    start = capture.offset + PIXEL_DATA_OFFSET
    end = start + (rows - 1) * stride + line_bytes
    if end > capture.size:
        raise BufferUnderrunError(
            f"{rows} rows at stride {stride} need {end} bytes but capture is {capture.size} bytes"
        )

    data = np.frombuffer(capture.buffer, dtype=np.uint8, count=end - start, offset=start)
    lines = as_strided(data, shape=(rows, line_bytes), strides=(stride, 1), writeable=False)
    return lines.copy()


def unpack(capture: RawCapture, header: SensorHeader, black_level: int) -> ChannelPlanes:
    """Split the packed Bayer mosaic into four black-level corrected planes.

    Even rows carry channels 0 and 1, odd rows channels 2 and 3; within a row
    even columns go to the first channel of the pair. Planes are in physical
    sensor order, see ``analysis.gain.channel_ordering`` for the logical view.
    """

    bits = header.bits_per_sample
    cluster_bytes = CLUSTER_BYTES[bits]
    plane_w = header.plane_width
    plane_h = header.plane_height
    rows = plane_h * 2
    clusters = (header.width + PIXELS_PER_CLUSTER - 1) // PIXELS_PER_CLUSTER

    if rows == 0 or clusters == 0:
        empty = tuple(np.zeros((plane_h, plane_w), dtype=np.uint16) for _ in range(NUM_CHANNELS))
        return ChannelPlanes(planes=empty)  # type: ignore[arg-type]

    logger.info(
        "unpacking %sx%s raw%s, stride %s, black level %s",
        header.width,
        header.height,
        bits,
        compute_stride(header),
        black_level,
    )

    lines = _scanlines(capture, header, rows, clusters * cluster_bytes)
    packed = lines.reshape(rows, clusters, cluster_bytes)
    raw = _unpack_raw10(packed) if bits == 10 else _unpack_raw12(packed)
    raw = raw.reshape(rows, clusters * PIXELS_PER_CLUSTER)

    corrected = black_level_correct(raw, black_level, header.max_value)

    planes = (
        np.ascontiguousarray(corrected[0::2, 0::2][:, :plane_w]),
        np.ascontiguousarray(corrected[0::2, 1::2][:, :plane_w]),
        np.ascontiguousarray(corrected[1::2, 0::2][:, :plane_w]),
        np.ascontiguousarray(corrected[1::2, 1::2][:, :plane_w]),
    )
    return ChannelPlanes(planes=planes)
