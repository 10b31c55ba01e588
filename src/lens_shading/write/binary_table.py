from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import struct

import numpy as np

from lens_shading.analysis.pipeline import LensShadingTable


# transform, grid_width, grid_height
PREFIX = struct.Struct("<3I")
NUM_CHANNELS = 4


@dataclass(frozen=True)
class BinaryTable:
    transform: int
    grid_width: int
    grid_height: int
    gains: np.ndarray  # (4, grid_height, grid_width) uint8


def encode_table(table: LensShadingTable) -> bytes:
    payload = b"".join(np.asarray(g, dtype=np.uint8).tobytes() for g in table.gains)
    return PREFIX.pack(table.transform, table.grid_width, table.grid_height) + payload


def decode_table(data: bytes) -> BinaryTable:
    if len(data) < PREFIX.size:
        raise ValueError(f"lens shading table too short: {len(data)} bytes")
    transform, grid_width, grid_height = PREFIX.unpack_from(data, 0)
    expected = PREFIX.size + NUM_CHANNELS * grid_width * grid_height
    if len(data) != expected:
        raise ValueError(f"lens shading table size mismatch: expected {expected} bytes, got {len(data)}")
    gains = np.frombuffer(data, dtype=np.uint8, offset=PREFIX.size).reshape(NUM_CHANNELS, grid_height, grid_width)
    return BinaryTable(transform=transform, grid_width=grid_width, grid_height=grid_height, gains=gains.copy())


def write_binary_table(path: Path, table: LensShadingTable) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        f.write(encode_table(table))


def read_binary_table(path: Path) -> BinaryTable:
    return decode_table(path.read_bytes())
