from __future__ import annotations

from dataclasses import dataclass, field
import numbers
from pathlib import Path
from typing import Any


MIN_CELL_SIZE = 2
MAX_CELL_SIZE = 32
DEFAULT_CELL_SIZE = 4

# Bit values match the -o mask of the original command line tool.
OUTPUT_FORMAT_BITS: dict[str, int] = {
    "header": 0x01,
    "binary": 0x02,
    "text": 0x04,
    "channels": 0x08,
}
CHANNEL_DUMP_FORMATS = ("bin", "tiff")


class InvalidConfigurationError(ValueError):
    pass


def normalize_cell_size(value: int) -> int:
    """Validate an analysis cell size, rounding odd sizes up to the next even one."""

    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidConfigurationError(f"analysis cell size must be an integer, got {value!r}")
    size = int(value)
    if size <= 0 or size > MAX_CELL_SIZE:
        raise InvalidConfigurationError(
            f"analysis cell size {value} out of range, expected 1..{MAX_CELL_SIZE}"
        )
    if size % 2 == 1:
        size += 1
    return size


def validate_black_level(value: int, max_value: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidConfigurationError(f"black level must be an integer, got {value!r}")
    level = int(value)
    if level < 0:
        raise InvalidConfigurationError(f"black level must be non-negative, got {value}")
    if max_value is not None and level >= max_value:
        raise InvalidConfigurationError(
            f"black level {level} must be below the sensor max value {max_value}"
        )
    return level


def formats_from_mask(mask: int) -> tuple[str, ...]:
    known = 0
    for bit in OUTPUT_FORMAT_BITS.values():
        known |= bit
    if mask <= 0 or mask & ~known:
        raise InvalidConfigurationError(f"invalid output format mask {mask}")
    return tuple(name for name, bit in OUTPUT_FORMAT_BITS.items() if mask & bit)


def _validate_formats(formats: Any) -> tuple[str, ...]:
    if isinstance(formats, int):
        return formats_from_mask(formats)
    values = tuple(str(v).lower() for v in formats)
    unknown = [v for v in values if v not in OUTPUT_FORMAT_BITS]
    if unknown:
        raise InvalidConfigurationError(f"unknown output formats: {', '.join(unknown)}")
    if not values:
        raise InvalidConfigurationError("at least one output format is required")
    return values


@dataclass
class AnalysisConfig:
    black_level: int = 0
    cell_size: int = DEFAULT_CELL_SIZE

    def __post_init__(self) -> None:
        self.black_level = validate_black_level(self.black_level)
        self.cell_size = normalize_cell_size(self.cell_size)


@dataclass
class OutputConfig:
    output_dir: Path = Path(".")
    formats: tuple[str, ...] = ("header",)
    channel_dump_format: str = "bin"
    write_report: bool = False

    def __post_init__(self) -> None:
        self.formats = _validate_formats(self.formats)
        if self.channel_dump_format not in CHANNEL_DUMP_FORMATS:
            raise InvalidConfigurationError(
                f"channel_dump_format must be one of {CHANNEL_DUMP_FORMATS}, got {self.channel_dump_format!r}"
            )


@dataclass
class AppConfig:
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    log_level: str = "INFO"
    log_file: Path | None = None


def _expand_path(value: str | None, base: Path) -> Path | None:
    if value in (None, ""):
        return None
    path = Path(value)
    if not path.is_absolute():
        path = (base / path).resolve()
    return path


def load_config(path: str | Path) -> AppConfig:
    try:
        import yaml  # type: ignore
    except Exception as exc:
        raise RuntimeError("PyYAML is required for config loading. Install with: pip install PyYAML") from exc

    cfg_path = Path(path).expanduser().resolve()
    with cfg_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise InvalidConfigurationError(f"config root must be a mapping: {cfg_path}")

    base = cfg_path.parent
    analysis_raw = raw.get("analysis", {}) or {}
    output_raw = raw.get("output", {}) or {}

    analysis = AnalysisConfig(
        black_level=analysis_raw.get("black_level", 0),
        cell_size=analysis_raw.get("cell_size", DEFAULT_CELL_SIZE),
    )

    output = OutputConfig(
        output_dir=_expand_path(output_raw.get("output_dir"), base) or base,
        formats=output_raw.get("formats", ("header",)),
        channel_dump_format=str(output_raw.get("channel_dump_format", "bin")).lower(),
        write_report=bool(output_raw.get("write_report", False)),
    )

    app = AppConfig(
        analysis=analysis,
        output=output,
        log_level=str(raw.get("log_level", "INFO")),
        log_file=_expand_path(raw.get("log_file"), base),
    )

    ensure_dirs(app)
    return app


def ensure_dirs(config: AppConfig) -> None:
    config.output.output_dir.mkdir(parents=True, exist_ok=True)
    if config.log_file is not None:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
