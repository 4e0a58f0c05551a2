from __future__ import annotations

import pytest

from fakes import FakeExportRef, FakePackage
from pkgexport.core.sniffer import ExportKind, TypeSniffer, classify


@pytest.mark.parametrize(
    ("chain", "kind"),
    [
        (["Texture2D", "Texture", "Object"], ExportKind.TEXTURE),
        (["Texture2DArray", "Texture", "Object"], ExportKind.TEXTURE),
        (["SoundWave", "SoundBase"], ExportKind.SOUND),
        (["AkMediaAssetData", "Object"], ExportKind.SOUND_MEDIA),
        (["AnimSequence", "AnimSequenceBase", "AnimationAsset"], ExportKind.ANIMATION_SEQUENCE),
        (["SkeletalMesh", "SkinnedAsset"], ExportKind.SKELETAL_MESH),
        (["StaticMesh", "Object"], ExportKind.STATIC_MESH),
        (["Skeleton", "Object"], ExportKind.SKELETON),
        (["UStaticMesh", "UObject"], ExportKind.STATIC_MESH),
        (["DataTable", "Object"], ExportKind.OTHER),
        ([], ExportKind.OTHER),
    ],
)
def test_classify(chain: list[str], kind: ExportKind) -> None:
    assert classify(chain) is kind


def test_scan_resolves_one_based_and_skips_dead_slots() -> None:
    texture = FakeExportRef("T_Rock", ["Texture2D", "Texture"])
    table = FakeExportRef("DT_Items", ["DataTable", "Object"])
    package = FakePackage("Mixed.uasset", [texture, None, table])

    descriptors = TypeSniffer().sniff(package)

    assert package.requested == [1, 2, 3]
    assert [(d.index, d.kind, d.name) for d in descriptors] == [
        (0, ExportKind.TEXTURE, "T_Rock"),
        (2, ExportKind.OTHER, "DT_Items"),
    ]


def test_scan_does_not_load_exports() -> None:
    ref = FakeExportRef("S_Hit", ["SoundWave"])
    list(TypeSniffer().scan(FakePackage("S_Hit.uasset", [ref])))
    assert ref.loads == 0
