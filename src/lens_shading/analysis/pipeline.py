from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
import logging
import mmap
from pathlib import Path
from typing import Iterator

import numpy as np

from lens_shading.config import AnalysisConfig, validate_black_level
from lens_shading.decode import ChannelPlanes, SensorHeader, open_capture, parse, resolve_black_level, unpack
from lens_shading.decode.types import Buffer

from .gain import CHANNEL_NAMES, channel_ordering, derive
from .grid import aggregate, grid_shape


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LensShadingTable:
    """Gain grids in logical R, Gr, Gb, B order, ready for the writers."""

    transform: int
    grid_width: int
    grid_height: int
    gains: tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]
    physical_channels: tuple[int, int, int, int] = (0, 1, 2, 3)

    def channels(self):
        for index, name in enumerate(CHANNEL_NAMES):
            yield index, name, self.physical_channels[index], self.gains[index]


@dataclass(frozen=True)
class AnalysisResult:
    header: SensorHeader
    black_level: int
    cell_size: int
    planes: ChannelPlanes
    table: LensShadingTable
    max_block_values: tuple[int, int, int, int]


def analyse_buffer(buffer: Buffer, config: AnalysisConfig | None = None) -> AnalysisResult:
    cfg = config or AnalysisConfig()

    capture = open_capture(buffer)
    header = parse(capture)

    black_level = resolve_black_level(header.model, cfg.black_level)
    validate_black_level(black_level, header.max_value)
    logger.info("sensor type: %s, black level: %s", header.model or "unknown", black_level)

    grid_width, grid_height = grid_shape(header.plane_width, header.plane_height)
    logger.info("grid size: %s x %s", grid_width, grid_height)

    planes = unpack(capture, header, black_level)
    ordering = channel_ordering(header.bayer_order)

    gains = []
    max_values = []
    for name, physical in zip(CHANNEL_NAMES, ordering):
        blocks, max_value = aggregate(planes[physical], cfg.cell_size)
        logger.debug("channel %s (plane %s): max block value %s", name, physical, max_value)
        gains.append(derive(blocks, max_value))
        max_values.append(max_value)

    table = LensShadingTable(
        transform=header.transform,
        grid_width=grid_width,
        grid_height=grid_height,
        gains=tuple(gains),  # type: ignore[arg-type]
        physical_channels=ordering,
    )
    return AnalysisResult(
        header=header,
        black_level=black_level,
        cell_size=cfg.cell_size,
        planes=planes,
        table=table,
        max_block_values=tuple(max_values),  # type: ignore[arg-type]
    )


@contextmanager
def open_file_capture(path: Path) -> Iterator[Buffer]:
    """Map a capture file read-only. An empty file yields `b""`."""

    size = path.stat().st_size
    logger.info("file size is %s", size)
    if size == 0:
        yield b""
        return
    with path.open("rb") as f, mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ) as view:
        yield view


def analyse_file(path: Path, config: AnalysisConfig | None = None) -> AnalysisResult:
    with open_file_capture(path) as buffer:
        return analyse_buffer(buffer, config)
