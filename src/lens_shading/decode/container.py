from __future__ import annotations

import logging

from .base import ContainerNotFoundError
from .types import Buffer, RawCapture


logger = logging.getLogger(__name__)

BRCM_MAGIC = b"BRCM"
JPEG_SOI = b"\xff\xd8"

# Distance of the BRCM block from the end of a JPEG+raw capture, per sensor.
JPEG_TRAILER_SIZES: tuple[tuple[str, int], ...] = (
    ("ov5647", 6404096),
    ("imx219", 10270208),
    ("imx477", 18711040),
)


def _has_magic(buffer: Buffer, offset: int) -> bool:
    if offset < 0 or offset + len(BRCM_MAGIC) > len(buffer):
        return False
    return bytes(buffer[offset : offset + len(BRCM_MAGIC)]) == BRCM_MAGIC


def locate(buffer: Buffer) -> int:
    """Return the byte offset of the BRCM raw block inside ``buffer``.

    Plain raw dumps carry the block at offset 0. JPEG captures with embedded
    raw carry it at a fixed distance from the end of the file, which depends on
    the sensor; each known distance is tried in turn.
    """

    size = len(buffer)
    offset = 0

    if bytes(buffer[: len(JPEG_SOI)]) == JPEG_SOI:
        for sensor, trailer in JPEG_TRAILER_SIZES:
            candidate = size - trailer
            if _has_magic(buffer, candidate):
                logger.debug("found %s raw trailer at offset %s", sensor, candidate)
                offset = candidate
                break
        else:
            logger.debug("JPEG preamble without a known raw trailer; trying offset 0")

    if not _has_magic(buffer, offset):
        raise ContainerNotFoundError("raw file missing BRCM header")
    return offset


def open_capture(buffer: Buffer) -> RawCapture:
    return RawCapture(buffer=buffer, offset=locate(buffer))
