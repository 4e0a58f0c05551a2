from __future__ import annotations

from pathlib import Path

import pytest

from pkgexport.core.concurrency import AtomicCounter, CancellationToken
from pkgexport.core.config import ExportOptions
from pkgexport.core.output import OutputGate, change_extension, derive_folder


def _gate(root: Path, overwrite: bool = False, **kwargs) -> OutputGate:
    return OutputGate(ExportOptions(output_root=root, overwrite=overwrite, workers=1), **kwargs)


@pytest.mark.parametrize(
    ("path", "folder"),
    [("Game/Content/Hero.uasset", "Game/Content"), ("Hero.uasset", ""), ("A/b", "A")],
)
def test_derive_folder(path: str, folder: str) -> None:
    assert derive_folder(path) == folder


@pytest.mark.parametrize(
    ("name", "ext", "expected"),
    [
        ("Arena.umap", ".json", "Arena.json"),
        ("Arena.umap", "json", "Arena.json"),
        ("archive.tar.gz", ".json", "archive.tar.json"),
        ("README", ".json", "README.json"),
        (".hidden", ".json", ".hidden.json"),
    ],
)
def test_change_extension(name: str, ext: str, expected: str) -> None:
    assert change_extension(name, ext) == expected


def test_gate_requires_output_root() -> None:
    with pytest.raises(ValueError, match="Output directory is not specified"):
        OutputGate(ExportOptions(workers=1))


def test_destination_joins_folder_below_root(output_root: Path) -> None:
    gate = _gate(output_root)
    assert gate.destination("Game/Content", "Hero.png") == output_root / "Game" / "Content" / "Hero.png"
    assert gate.destination("", "Hero.png") == output_root / "Hero.png"


def test_destination_refuses_to_escape_root(output_root: Path) -> None:
    with pytest.raises(ValueError):
        _gate(output_root).destination("../../elsewhere", "Hero.png")


def test_write_creates_folders_and_counts(output_root: Path) -> None:
    counter = AtomicCounter()
    gate = _gate(output_root, counter=counter)

    assert gate.write("A/B", "file.bin", b"data") is True
    assert (output_root / "A" / "B" / "file.bin").read_bytes() == b"data"
    assert counter.value == 1


def test_existing_file_is_kept_without_overwrite(output_root: Path) -> None:
    target = output_root / "A" / "file.bin"
    target.parent.mkdir(parents=True)
    target.write_bytes(b"old")
    calls = []

    def payload() -> bytes:
        calls.append(1)
        return b"new"

    assert _gate(output_root).write("A", "file.bin", payload) is False
    assert target.read_bytes() == b"old"
    # The payload is never produced for a skipped output
    assert calls == []


def test_existing_file_is_replaced_with_overwrite(output_root: Path) -> None:
    target = output_root / "A" / "file.bin"
    target.parent.mkdir(parents=True)
    target.write_bytes(b"old")

    assert _gate(output_root, overwrite=True).write("A", "file.bin", b"new") is True
    assert target.read_bytes() == b"new"


def test_multi_file_job_is_all_or_nothing(output_root: Path) -> None:
    folder = output_root / "T"
    folder.mkdir(parents=True)
    (folder / "Atlas_1.png").write_bytes(b"old")
    outputs = [(f"Atlas_{i}.png", b"frame") for i in range(3)]

    assert _gate(output_root).write_all("T", outputs) == 0
    assert sorted(p.name for p in folder.iterdir()) == ["Atlas_1.png"]
    assert (folder / "Atlas_1.png").read_bytes() == b"old"


def test_nothing_is_written_after_cancellation(output_root: Path) -> None:
    token = CancellationToken()
    token.cancel("stop")
    assert _gate(output_root, token=token).write_all("A", [("file.bin", b"data")]) == 0
    assert not output_root.exists()


def test_can_write_reports_each_existing_file(output_root: Path,
                                              caplog: pytest.LogCaptureFixture) -> None:
    output_root.mkdir()
    (output_root / "a.png").write_bytes(b"")
    gate = _gate(output_root)
    assert gate.can_write([output_root / "a.png", output_root / "a.hdr"]) is False
    assert "Already exists" in caplog.text
    assert gate.can_write([output_root / "b.png"]) is True
