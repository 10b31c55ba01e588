from __future__ import annotations

from pathlib import Path

from lens_shading.analysis.grid import GRID_PITCH
from lens_shading.analysis.pipeline import LensShadingTable


def render_text_table(table: LensShadingTable) -> str:
    """One ``x y gain channel`` line per cell, x/y being the cell centre in plane pixels."""

    half = GRID_PITCH // 2
    lines = []
    for index, _name, _physical, gains in table.channels():
        for y in range(table.grid_height):
            for x in range(table.grid_width):
                lines.append(f"{x * GRID_PITCH + half} {y * GRID_PITCH + half} {int(gains[y, x])} {index}")
    return "".join(line + "\n" for line in lines)


def write_text_table(path: Path, table: LensShadingTable) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_text_table(table), encoding="ascii")
