from __future__ import annotations

import logging
from types import MappingProxyType

import numpy as np

from lens_shading.decode.types import BayerOrder


logger = logging.getLogger(__name__)

UNITY_GAIN = 32
MAX_GAIN = 255
GAIN_SHIFT = 5

CHANNEL_NAMES = ("R", "Gr", "Gb", "B")

# Physical plane index for each logical channel R, Gr, Gb, B.
CHANNEL_ORDERING = MappingProxyType(
    {
        BayerOrder.RGGB: (0, 1, 2, 3),
        BayerOrder.GBRG: (2, 3, 0, 1),
        BayerOrder.BGGR: (3, 2, 1, 0),
        BayerOrder.GRBG: (1, 0, 3, 2),
    }
)


def channel_ordering(order: BayerOrder | int) -> tuple[int, int, int, int]:
    return CHANNEL_ORDERING[BayerOrder(order)]


def derive(blocks: np.ndarray, max_value: int) -> np.ndarray:
    """Turn block values into 8 bit gains, 32 meaning x1.0.

    Each gain is ``(max_value << 5) / block`` rounded to nearest and clipped to
    ``[32, 255]``.
    """

    values = np.asarray(blocks, dtype=np.int64)
    if max_value <= 0:
        logger.warning("channel has no signal above black level; using maximum gain everywhere")
        return np.full(values.shape, MAX_GAIN, dtype=np.uint8)

    reference = int(max_value) << GAIN_SHIFT
    divisor = np.maximum(values, 1)
    gains = (2 * reference + divisor) // (2 * divisor)

    below_unity = int(np.count_nonzero(gains < UNITY_GAIN))
    if below_unity:
        logger.warning("%s cells brighter than the reference; clipping their gain to x1.0", below_unity)

    return np.clip(gains, UNITY_GAIN, MAX_GAIN).astype(np.uint8)
