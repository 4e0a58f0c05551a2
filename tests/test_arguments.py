from __future__ import annotations

import logging
from pathlib import Path

import pytest

from pkgexport.core.arguments import MATCH_ALL, read_list_file, resolve_candidates


def _write_list(path: Path, lines: list[str]) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_list_file_skips_comments_sections_and_blanks(tmp_path: Path) -> None:
    list_file = _write_list(tmp_path / "packages.txt", [
        "# exported by hand",
        "[Textures]",
        "",
        "   ",
        "  Game/Content/T_Rock.uasset  ",
        "*/Icons*",
    ])
    assert list(read_list_file(str(list_file))) == ["Game/Content/T_Rock.uasset", "*/Icons*"]


def test_list_file_with_byte_order_mark(tmp_path: Path) -> None:
    list_file = tmp_path / "bom.txt"
    list_file.write_bytes("\ufeffGame/A.uasset\n".encode("utf-8"))
    assert list(read_list_file(str(list_file))) == ["Game/A.uasset"]


def test_list_file_with_invalid_utf8_is_replaced(tmp_path: Path) -> None:
    list_file = tmp_path / "latin1.txt"
    list_file.write_bytes(b"G/caf\xe9.ini\nG/*\n")
    assert list(read_list_file(str(list_file))) == ["G/caf\ufffd.ini", "G/*"]


def test_list_files_come_before_patterns(tmp_path: Path) -> None:
    first = _write_list(tmp_path / "one.txt", ["a/*"])
    second = _write_list(tmp_path / "two.txt", ["b/*", "c/*"])
    candidates = resolve_candidates(["x/y.uasset"], [str(first), str(second)])
    assert candidates == ["a/*", "b/*", "c/*", "x/y.uasset"]


def test_missing_list_file_is_skipped(tmp_path: Path) -> None:
    present = _write_list(tmp_path / "present.txt", ["a/*"])
    candidates = resolve_candidates([], [str(tmp_path / "missing.txt"), str(present)])
    assert candidates == ["a/*"]


@pytest.mark.parametrize("patterns", [None, [], ["", ""]])
def test_nothing_selected_means_everything(patterns: list[str] | None) -> None:
    assert resolve_candidates(patterns, None) == [MATCH_ALL]


def test_empty_list_file_means_everything(tmp_path: Path) -> None:
    empty = _write_list(tmp_path / "empty.txt", ["# nothing here"])
    assert resolve_candidates(None, [str(empty)]) == ["*"]


def test_loading_a_list_file_is_logged(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    list_file = _write_list(tmp_path / "packages.txt", ["a/*"])
    caplog.set_level(logging.INFO, logger="pkgexport")
    resolve_candidates(None, [str(list_file)])
    assert "Loading file list" in caplog.text
