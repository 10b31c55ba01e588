from __future__ import annotations

import logging
import os
from pathlib import Path
import tempfile

from lens_shading.analysis import AnalysisResult, analyse_file
from lens_shading.config import AppConfig
from lens_shading.write import (
    build_report,
    require_tifffile,
    write_binary_table,
    write_channel_planes,
    write_header_file,
    write_report,
    write_text_table,
)


logger = logging.getLogger(__name__)

HEADER_FILENAME = "ls_table.h"
BINARY_FILENAME = "ls.bin"
TEXT_FILENAME = "ls_table.txt"
REPORT_FILENAME = "analysis.json"


def _render_outputs(config: AppConfig, input_path: Path, result: AnalysisResult, stage_dir: Path) -> list[Path]:
    formats = set(config.output.formats)
    staged: list[Path] = []

    if "header" in formats:
        path = stage_dir / HEADER_FILENAME
        write_header_file(path, result.table)
        staged.append(path)
    if "binary" in formats:
        path = stage_dir / BINARY_FILENAME
        write_binary_table(path, result.table)
        staged.append(path)
    if "text" in formats:
        path = stage_dir / TEXT_FILENAME
        write_text_table(path, result.table)
        staged.append(path)
    if "channels" in formats:
        staged.extend(write_channel_planes(stage_dir, result.planes, fmt=config.output.channel_dump_format))
    if config.output.write_report:
        path = stage_dir / REPORT_FILENAME
        write_report(path, build_report(input_path, result))
        staged.append(path)
    return staged


def write_outputs(config: AppConfig, input_path: Path, result: AnalysisResult, output_dir: Path) -> list[Path]:
    """Write the selected outputs into `output_dir`, all of them or none.

    Every artifact is rendered into a staging directory beside the outputs and
    only moved into place once all of them were written.
    """

    if "channels" in config.output.formats and config.output.channel_dump_format == "tiff":
        require_tifffile()

    output_dir.mkdir(parents=True, exist_ok=True)
    with tempfile.TemporaryDirectory(prefix=".lens_shading_", dir=str(output_dir)) as td:
        staged = _render_outputs(config, input_path, result, Path(td))
        targets = [output_dir / path.name for path in staged]
        blocked = [target for target in targets if target.is_dir()]
        if blocked:
            raise IsADirectoryError(f"output path is a directory: {blocked[0]}")
        for src, dst in zip(staged, targets):
            os.replace(src, dst)

    for path in targets:
        logger.info("wrote %s", path)
    return targets


def analyse_one(config: AppConfig, input_path: Path, output_dir: Path | None = None) -> tuple[AnalysisResult, list[Path]]:
    """Analyse one capture and write the selected outputs.

    Nothing is written unless the whole analysis succeeds.
    """

    result = analyse_file(input_path, config.analysis)
    out_dir = output_dir or config.output.output_dir
    return result, write_outputs(config, input_path, result, out_dir)
