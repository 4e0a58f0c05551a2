from __future__ import annotations

from pathlib import Path

import pytest

from fakes import FakeProvider
from pkgexport.core.concurrency import AtomicCounter, CancellationToken
from pkgexport.core.errors import UnsupportedExportError
from pkgexport.providers import (
    CatalogEntry,
    Decoders,
    DirectoryProvider,
    ProviderOptions,
    ProviderRegistry,
    get_provider,
)


def _tree(root: Path) -> Path:
    (root / "Game" / "Content").mkdir(parents=True)
    (root / "Game" / "Content" / "Hero.uasset").write_bytes(b"\xc1\x83\x2a\x9e")
    (root / "Game" / "readme.txt").write_text("hello", encoding="utf-8")
    (root / "top.ini").write_text("[x]", encoding="utf-8")
    return root


def test_catalog_entry_normalizes_path() -> None:
    entry = CatalogEntry("Game\\Content\\Hero.UASSET", size=4)
    assert entry.path == "Game/Content/Hero.UASSET"
    assert entry.name == "Hero.UASSET"
    assert entry.extension == ".uasset"
    assert CatalogEntry("Game/LICENSE").extension == ""


def test_directory_provider_catalog(tmp_path: Path) -> None:
    root = _tree(tmp_path / "game")
    with DirectoryProvider() as provider:
        provider.mount(str(root), ProviderOptions())
        assert list(provider.files) == ["Game/Content/Hero.uasset", "Game/readme.txt", "top.ini"]
        entry = provider.files["Game/readme.txt"]
        assert entry.size == 5
        assert provider.read_raw(entry) == b"hello"
        assert provider.try_load_package(entry) is None
    assert provider.files == {}


def test_directory_provider_rejects_missing_root(tmp_path: Path) -> None:
    with pytest.raises(NotADirectoryError):
        DirectoryProvider().mount(str(tmp_path / "missing"), ProviderOptions())


def test_load_package_errors(tmp_path: Path) -> None:
    provider = DirectoryProvider()
    provider.mount(str(_tree(tmp_path / "game")), ProviderOptions())
    with pytest.raises(KeyError):
        provider.load_package("Nope.uasset")
    with pytest.raises(ValueError):
        provider.load_package("top.ini")


def test_default_decoders_reject_everything() -> None:
    decoders = Decoders()
    decoders.prepare()
    with pytest.raises(UnsupportedExportError):
        decoders.decode_texture(object(), "DesktopMobile")
    with pytest.raises(UnsupportedExportError):
        decoders.decode_audio(object())
    with pytest.raises(UnsupportedExportError):
        decoders.export_mesh_or_animation(object(), "out")
    assert decoders.mesh_output_path(object(), "out") is None


def test_registry_knows_directory_provider() -> None:
    assert ProviderRegistry.get("directory") is DirectoryProvider
    assert "directory" in ProviderRegistry.list_ids()
    assert isinstance(get_provider(), DirectoryProvider)
    with pytest.raises(KeyError):
        ProviderRegistry.create("no-such-provider")


def test_registry_register(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(ProviderRegistry, "_providers", dict(ProviderRegistry._providers))
    ProviderRegistry.register(FakeProvider)
    assert isinstance(ProviderRegistry.create("fake"), FakeProvider)


def test_version_check() -> None:
    class PinnedProvider(FakeProvider):
        supported_versions = ("GAME_UE4_27",)

    assert FakeProvider().validate_version("GAME_ANYTHING") is True
    assert PinnedProvider().validate_version("GAME_UE4_27") is True
    assert PinnedProvider().validate_version("GAME_UE5_LATEST") is False


def test_cancellation_token_fires_once() -> None:
    token = CancellationToken()
    assert token.cancelled is False
    assert token.cancel("first") is True
    assert token.cancel("second") is False
    assert token.cancelled is True
    assert token.reason == "first"


def test_counter_only_goes_up() -> None:
    counter = AtomicCounter()
    assert counter.increment() == 1
    assert counter.increment(2) == 3
    with pytest.raises(ValueError):
        counter.increment(-1)
    assert counter.value == 3
