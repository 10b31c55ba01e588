from __future__ import annotations

import argparse
import dataclasses
import json
import logging
from pathlib import Path
import sys

from lens_shading.analysis.pipeline import open_file_capture
from lens_shading.config import AppConfig, formats_from_mask, load_config
from lens_shading.decode import open_capture, parse, resolve_black_level
from lens_shading.utils.logging_utils import configure_logging


logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lens-shading-analyse",
        description="Build a lens shading table from a raw capture of a uniformly lit scene",
    )
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    sub = parser.add_subparsers(dest="command", required=True)

    analyse = sub.add_parser("analyse", help="Analyse a raw capture and write the lens shading table")
    analyse.add_argument("input", help="Raw image file (raw dump or JPEG with embedded raw)")
    analyse.add_argument("--config", default=None, help="Optional YAML config")
    analyse.add_argument("-b", "--black-level", type=int, default=None, help="Black level, 0 for the sensor default")
    analyse.add_argument(
        "-s",
        "--cell-size",
        type=int,
        default=None,
        help="Size of the analysis cell. Minimum 2, maximum 32, default 4",
    )
    analyse.add_argument(
        "-o",
        "--output-format",
        type=int,
        default=None,
        help="Output mask, combine by adding: 1 header file, 2 binary file, 4 text file, 8 channel data",
    )
    analyse.add_argument("--channel-format", choices=("bin", "tiff"), default=None, help="Channel data format")
    analyse.add_argument("--report", action="store_true", help="Also write an analysis.json report")
    analyse.add_argument("--out", default=None, help="Output directory override")
    analyse.add_argument("--json", action="store_true", help="Emit machine-readable JSON summary")

    inspect = sub.add_parser("inspect", help="Decode and print the raw header only")
    inspect.add_argument("input", help="Raw image file")
    inspect.add_argument("--json", action="store_true", help="Emit machine-readable JSON")

    return parser


def _resolve_config(args: argparse.Namespace) -> AppConfig:
    config = load_config(args.config) if args.config else AppConfig()

    analysis_changes = {}
    if args.black_level is not None:
        analysis_changes["black_level"] = args.black_level
    if args.cell_size is not None:
        analysis_changes["cell_size"] = args.cell_size
    if analysis_changes:
        config.analysis = dataclasses.replace(config.analysis, **analysis_changes)

    output_changes: dict[str, object] = {}
    if args.output_format is not None:
        output_changes["formats"] = formats_from_mask(args.output_format)
    if args.channel_format is not None:
        output_changes["channel_dump_format"] = args.channel_format
    if args.report:
        output_changes["write_report"] = True
    if args.out:
        output_changes["output_dir"] = Path(args.out).expanduser().resolve()
    if output_changes:
        config.output = dataclasses.replace(config.output, **output_changes)

    if args.log_level:
        config.log_level = args.log_level
    return config


def _cmd_analyse(args: argparse.Namespace) -> int:
    from lens_shading.service import analyse_one

    config = _resolve_config(args)
    configure_logging(config.log_level, config.log_file)

    input_path = Path(args.input).expanduser().resolve()
    result, written = analyse_one(config, input_path=input_path)

    table = result.table
    if args.json:
        payload = {
            "input": str(input_path),
            "sensor_model": result.header.model,
            "black_level": result.black_level,
            "cell_size": result.cell_size,
            "grid_width": table.grid_width,
            "grid_height": table.grid_height,
            "transform": table.transform,
            "outputs": [str(p) for p in written],
        }
        print(json.dumps(payload, indent=2))
        return 0

    print(f"Input: {input_path}")
    print(f"Sensor: {result.header.model or 'unknown'} (black level {result.black_level})")
    print(f"Grid size: {table.grid_width} x {table.grid_height}")
    for index, name, physical, gains in table.channels():
        low = int(gains.min()) if gains.size else 0
        high = int(gains.max()) if gains.size else 0
        print(f"  {name:<2} ch {physical}: gain {low}..{high} (max block {result.max_block_values[index]})")
    print("Outputs:")
    for p in written:
        print(f"  {p}")
    return 0


def _cmd_inspect(args: argparse.Namespace) -> int:
    configure_logging(args.log_level or "WARNING")

    input_path = Path(args.input).expanduser().resolve()
    with open_file_capture(input_path) as buffer:
        capture = open_capture(buffer)
        header = parse(capture)

    payload = {
        "input": str(input_path),
        "header_offset": capture.offset,
        "sensor_model": header.model,
        "default_black_level": resolve_black_level(header.model),
        "width": header.width,
        "height": header.height,
        "padding_right": header.padding_right,
        "padding_down": header.padding_down,
        "transform": header.transform,
        "bayer_order": header.bayer_order.name,
        "bits_per_sample": header.bits_per_sample,
    }
    if args.json:
        print(json.dumps(payload, indent=2))
        return 0

    for key, value in payload.items():
        print(f"{key:>20}: {value}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "analyse":
            return _cmd_analyse(args)
        if args.command == "inspect":
            return _cmd_inspect(args)

        parser.error(f"unknown command: {args.command}")
        return 2
    except Exception as exc:
        logger.exception("fatal error")
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
