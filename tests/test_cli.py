"""Smoke tests for the command-line entry point."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from prototype_assembler.cli import load_screen_file, main


def _write_json(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_main_writes_prototype_from_object_payload(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    source = _write_json(
        tmp_path / "screens.json",
        {
            "platform": "desktop",
            "projectName": "Atlas",
            "screens": [
                {"name": "Home", "htmlContent": '<a href="About">About</a>', "isRoot": True},
                {"name": "About", "htmlContent": "<p>About us</p>"},
            ],
        },
    )
    output = tmp_path / "dist" / "prototype.html"

    exit_code = main(["--input", str(source), "--output", str(output)])

    assert exit_code == 0
    html = output.read_text(encoding="utf-8")
    assert "<title>Atlas - Prototype</title>" in html
    assert "window-frame--desktop" in html
    assert '<a data-flow="screen-about" href="About">About</a>' in html
    assert capsys.readouterr().out.strip() == f"Wrote 2 screens to {output}"


def test_main_flags_override_file_values(tmp_path: Path) -> None:
    source = _write_json(
        tmp_path / "screens.json",
        [{"name": "Home", "html": "<p>Hi</p>"}],
    )
    output = tmp_path / "out.html"

    exit_code = main(
        [
            "--input",
            str(source),
            "--output",
            str(output),
            "--platform",
            "mobile",
            "--project-name",
            "Override",
        ]
    )

    assert exit_code == 0
    html = output.read_text(encoding="utf-8")
    assert "<title>Override - Prototype</title>" in html
    assert "device-frame--mobile" in html


def test_main_reports_invalid_platform(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    source = _write_json(
        tmp_path / "screens.json", {"platform": "watch", "screens": []}
    )

    exit_code = main(["--input", str(source), "--output", str(tmp_path / "x.html")])

    assert exit_code == 1
    assert "error: Unknown platform 'watch'" in capsys.readouterr().err
    assert not (tmp_path / "x.html").exists()


def test_main_reports_unreadable_input(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    source = tmp_path / "broken.json"
    source.write_text("{not json", encoding="utf-8")

    exit_code = main(["--input", str(source), "--output", str(tmp_path / "x.html")])

    assert exit_code == 1
    assert capsys.readouterr().err.startswith("error: ")


def test_load_screen_file_rejects_non_list_screens(tmp_path: Path) -> None:
    source = _write_json(tmp_path / "screens.json", {"screens": "Home"})

    with pytest.raises(ValueError):
        load_screen_file(source)
