from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
import json
from pathlib import Path

from lens_shading import __version__
from lens_shading.analysis.pipeline import AnalysisResult


@dataclass
class ChannelSummary:
    name: str
    physical_channel: int
    max_block_value: int
    min_gain: int
    max_gain: int


@dataclass
class AnalysisReport:
    source_filename: str
    sensor_model: str
    width: int
    height: int
    bits_per_sample: int
    bayer_order: str
    transform: int
    black_level: int
    cell_size: int
    grid_width: int
    grid_height: int
    channels: list[ChannelSummary]
    tool_version: str
    created_at_utc: str


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_report(source: Path, result: AnalysisResult) -> AnalysisReport:
    header = result.header
    table = result.table
    channels = [
        ChannelSummary(
            name=name,
            physical_channel=physical,
            max_block_value=int(result.max_block_values[index]),
            min_gain=int(gains.min()) if gains.size else 0,
            max_gain=int(gains.max()) if gains.size else 0,
        )
        for index, name, physical, gains in table.channels()
    ]
    return AnalysisReport(
        source_filename=source.name,
        sensor_model=header.model,
        width=header.width,
        height=header.height,
        bits_per_sample=header.bits_per_sample,
        bayer_order=header.bayer_order.name,
        transform=header.transform,
        black_level=result.black_level,
        cell_size=result.cell_size,
        grid_width=table.grid_width,
        grid_height=table.grid_height,
        channels=channels,
        tool_version=__version__,
        created_at_utc=utc_now_iso(),
    )


def write_report(path: Path, report: AnalysisReport) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(asdict(report), f, indent=2, sort_keys=True)
        f.write("\n")
