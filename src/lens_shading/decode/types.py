from __future__ import annotations

from dataclasses import dataclass
import enum
from typing import Union

import numpy as np


Buffer = Union[bytes, bytearray, memoryview]


class BayerOrder(enum.IntEnum):
    RGGB = 0
    GBRG = 1
    BGGR = 2
    GRBG = 3


@dataclass(frozen=True)
class RawCapture:
    """Borrowed view over a capture buffer and the offset of its BRCM header."""

    buffer: Buffer
    offset: int

    @property
    def size(self) -> int:
        return len(self.buffer)


@dataclass(frozen=True)
class SensorHeader:
    model: str
    width: int
    height: int
    padding_right: int
    padding_down: int
    transform: int
    image_format: int
    bayer_order: BayerOrder
    bayer_format: int

    @property
    def bits_per_sample(self) -> int:
        return self.bayer_format * 2 + 4

    @property
    def max_value(self) -> int:
        return (1 << self.bits_per_sample) - 1

    @property
    def plane_width(self) -> int:
        return self.width // 2

    @property
    def plane_height(self) -> int:
        return self.height // 2


@dataclass
class ChannelPlanes:
    planes: tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]

    def __post_init__(self) -> None:
        for plane in self.planes:
            plane.setflags(write=False)

    def __getitem__(self, index: int) -> np.ndarray:
        return self.planes[index]

    def __len__(self) -> int:
        return len(self.planes)

    @property
    def shape(self) -> tuple[int, int]:
        return self.planes[0].shape
