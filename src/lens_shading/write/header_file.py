from __future__ import annotations

from pathlib import Path

from lens_shading.analysis.pipeline import LensShadingTable


def render_header(table: LensShadingTable) -> str:
    lines = ["uint8_t ls_grid[] = {"]
    for _index, name, physical, gains in table.channels():
        lines.append(f"//{name} - Ch {physical}")
        lines.append("".join(f"{int(g)}, " for g in gains.ravel()))
    lines.append("};")
    lines.append(f"uint32_t ref_transform = {table.transform};")
    lines.append(f"uint32_t grid_width = {table.grid_width};")
    lines.append(f"uint32_t grid_height = {table.grid_height};")
    return "\n".join(lines) + "\n"


def write_header_file(path: Path, table: LensShadingTable) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_header(table), encoding="ascii")
