from __future__ import annotations

import json
from pathlib import Path
import sys

import numpy as np

from lens_shading.cli import main


def _write_capture(tmp_path: Path, make_capture) -> Path:
    mosaic = np.full((128, 128), 600, dtype=np.uint16)
    src = tmp_path / "wall.raw"
    src.write_bytes(bytes(make_capture(128, 128, samples=mosaic, transform=2)))
    return src


def test_analyse_writes_selected_outputs(tmp_path: Path, make_capture, capsys) -> None:
    src = _write_capture(tmp_path, make_capture)
    out_dir = tmp_path / "out"

    rc = main(["analyse", str(src), "-o", "7", "-s", "3", "--out", str(out_dir), "--json"])

    assert rc == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["cell_size"] == 4
    assert payload["transform"] == 2
    assert (out_dir / "ls_table.h").exists()
    assert (out_dir / "ls.bin").exists()
    assert (out_dir / "ls_table.txt").exists()
    assert not (out_dir / "ch1.bin").exists()


def test_analyse_with_config_and_report(tmp_path: Path, make_capture) -> None:
    src = _write_capture(tmp_path, make_capture)
    cfg = tmp_path / "config.yaml"
    cfg.write_text("output:\n  output_dir: ./tables\n  formats: [binary, channels]\n", encoding="utf-8")

    rc = main(["analyse", str(src), "--config", str(cfg), "--report"])

    assert rc == 0
    tables = tmp_path / "tables"
    assert (tables / "ls.bin").exists()
    assert (tables / "ch4.bin").exists()
    assert (tables / "analysis.json").exists()
    assert not (tables / "ls_table.h").exists()


def test_analyse_invalid_cell_size_fails(tmp_path: Path, make_capture) -> None:
    src = _write_capture(tmp_path, make_capture)
    out_dir = tmp_path / "out"
    assert main(["analyse", str(src), "-s", "40", "--out", str(out_dir)]) == 1
    assert not out_dir.exists()


def test_analyse_missing_header_fails_without_output(tmp_path: Path) -> None:
    src = tmp_path / "bad.raw"
    src.write_bytes(b"\x00" * 4096)
    out_dir = tmp_path / "out"

    assert main(["analyse", str(src), "--out", str(out_dir)]) == 1
    assert not (out_dir / "ls_table.h").exists()


def test_inspect_json(tmp_path: Path, make_capture, capsys) -> None:
    src = _write_capture(tmp_path, make_capture)

    rc = main(["inspect", str(src), "--json"])

    assert rc == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["sensor_model"] == "imx219"
    assert payload["default_black_level"] == 64
    assert payload["width"] == 128
    assert payload["bits_per_sample"] == 10
    assert payload["bayer_order"] == "RGGB"


def test_analyse_blocked_output_writes_nothing(tmp_path: Path, make_capture) -> None:
    src = _write_capture(tmp_path, make_capture)
    out_dir = tmp_path / "out"
    (out_dir / "ch1.bin").mkdir(parents=True)

    assert main(["analyse", str(src), "-o", "9", "--out", str(out_dir)]) == 1
    assert not (out_dir / "ls_table.h").exists()
    assert sorted(p.name for p in out_dir.iterdir()) == ["ch1.bin"]


def test_inspect_empty_file_fails(tmp_path: Path, capsys) -> None:
    src = tmp_path / "empty.raw"
    src.write_bytes(b"")

    assert main(["inspect", str(src)]) == 1
    assert "BRCM" in capsys.readouterr().err


def test_analyse_tiff_dump_without_tifffile_writes_nothing(tmp_path: Path, make_capture, monkeypatch) -> None:
    monkeypatch.setitem(sys.modules, "tifffile", None)
    src = _write_capture(tmp_path, make_capture)
    out_dir = tmp_path / "out"

    rc = main(["analyse", str(src), "-o", "9", "--channel-format", "tiff", "--out", str(out_dir)])

    assert rc == 1
    assert not out_dir.exists() or not any(out_dir.iterdir())
