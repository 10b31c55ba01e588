from __future__ import annotations

from pathlib import Path

import numpy as np

from lens_shading.decode.types import ChannelPlanes


def _import_tifffile():
    try:
        import tifffile  # type: ignore
    except Exception as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("tifffile is required for TIFF channel dumps. Install with: pip install '.[io]'") from exc
    return tifffile


def require_tifffile() -> None:
    """Fail early when TIFF channel dumps are requested without tifffile installed."""

    _import_tifffile()


def write_channel_planes(output_dir: Path, planes: ChannelPlanes, fmt: str = "bin") -> list[Path]:
    """Dump the physical channel planes as ch1..ch4, raw little-endian uint16 or 16 bit TIFF."""

    output_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for index in range(len(planes)):
        plane = np.asarray(planes[index], dtype="<u2")
        if fmt == "tiff":
            path = output_dir / f"ch{index + 1}.tiff"
            _write_tiff(path, plane)
        else:
            path = output_dir / f"ch{index + 1}.bin"
            path.write_bytes(plane.tobytes())
        paths.append(path)
    return paths


def _write_tiff(path: Path, plane: np.ndarray) -> None:
    tifffile = _import_tifffile()
    tifffile.imwrite(str(path), plane, photometric="minisblack")
