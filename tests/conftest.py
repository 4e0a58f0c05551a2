from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest
from PIL import Image

from pkgexport.core import log
from pkgexport.core.config import Config

TESTS_ROOT = Path(__file__).resolve().parent
if str(TESTS_ROOT) not in sys.path:
    sys.path.insert(0, str(TESTS_ROOT))

from fakes import FakeExportRef, FakePackage, FakeProvider  # noqa: E402


@pytest.fixture(autouse=True)
def _configure_test_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    # Keep settings lookups away from the real user data dir
    monkeypatch.setenv("PKGEXPORT_HOME", str(tmp_path / "home"))
    yield
    # The CLI binds a handler to the captured stderr of the test that ran it
    package_logger = logging.getLogger(log.ROOT_LOGGER_NAME)
    if log._HANDLER is not None:
        package_logger.removeHandler(log._HANDLER)
        log._HANDLER = None
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    return tmp_path / "settings.json"


@pytest.fixture
def config(settings_file: Path) -> Config:
    return Config(str(settings_file))


@pytest.fixture
def output_root(tmp_path: Path) -> Path:
    return tmp_path / "out"


@pytest.fixture
def scenario_provider() -> FakeProvider:
    """A/x is a sound, A/y a texture, B/z.bin unrecognized data outside the A/* pattern."""
    sound = FakeExportRef("x", ["SoundWave", "SoundBase", "Object"], payload=("OGG", b"OggS-data"))
    texture = FakeExportRef("y", ["Texture2D", "Texture", "Object"],
                            payload=[Image.new("RGB", (4, 4), (255, 0, 0))])
    return FakeProvider({
        "A/x.uasset": (b"x-raw", FakePackage("x.uasset", [sound])),
        "A/y.uasset": (b"y-raw", FakePackage("y.uasset", [texture])),
        "B/z.bin": (b"z-raw", None),
    })
