from __future__ import annotations

from pathlib import Path

import pytest

from nmsmodmanager import FilesystemError, Resolution, install_archive, resolve_conflict


@pytest.fixture
def staged_conflict(mods_root: Path, make_zip) -> Path:
    installed = mods_root / "CoolMod"
    installed.mkdir()
    (installed / "old.pak").write_text("old")
    report = install_archive(make_zip("coolmod.zip", {"CoolMod/new.pak": "new"}), mods_root)
    [conflict] = report.conflicts
    return conflict.staged_path


def test_replace_swaps_in_staged_copy(mods_root: Path, staged_conflict: Path) -> None:
    result = resolve_conflict(mods_root, "CoolMod", staged_conflict, replace=True)

    assert result is Resolution.REPLACED
    assert sorted(p.name for p in (mods_root / "CoolMod").iterdir()) == ["new.pak"]
    assert sorted(p.name for p in mods_root.iterdir()) == ["CoolMod"]


def test_keep_discards_staged_copy(mods_root: Path, staged_conflict: Path) -> None:
    result = resolve_conflict(mods_root, "CoolMod", staged_conflict, replace=False)

    assert result is Resolution.KEPT
    assert (mods_root / "CoolMod" / "old.pak").read_text() == "old"
    assert sorted(p.name for p in mods_root.iterdir()) == ["CoolMod"]


def test_failed_move_restores_installed_folder(
    mods_root: Path, staged_conflict: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _fail(source: Path, destination: Path) -> Path:
        raise FilesystemError(source, "simulated")

    monkeypatch.setattr("nmsmodmanager.conflict_resolver.move_tree", _fail)
    with pytest.raises(FilesystemError):
        resolve_conflict(mods_root, "CoolMod", staged_conflict, replace=True)

    assert (mods_root / "CoolMod" / "old.pak").read_text() == "old"
    assert not any(p.name.startswith(".CoolMod") for p in mods_root.iterdir())
    assert staged_conflict.exists()


def test_replace_with_missing_staged_folder(mods_root: Path, tmp_path: Path) -> None:
    with pytest.raises(FilesystemError):
        resolve_conflict(mods_root, "CoolMod", tmp_path / "nothing", replace=True)


def test_replace_without_installed_folder_just_moves(mods_root: Path, staged_conflict: Path) -> None:
    import shutil

    shutil.rmtree(mods_root / "CoolMod")
    resolve_conflict(mods_root, "CoolMod", staged_conflict, replace=True)
    assert (mods_root / "CoolMod" / "new.pak").read_text() == "new"


def test_replace_matches_installed_folder_regardless_of_case(mods_root: Path, make_zip) -> None:
    installed = mods_root / "CoolMod"
    installed.mkdir()
    (installed / "old.pak").write_text("old")
    report = install_archive(
        make_zip("lower.zip", {"coolmod/new.pak": "new"}), mods_root, installed_names=["COOLMOD"]
    )
    [conflict] = report.conflicts
    assert conflict.name == "coolmod"

    resolve_conflict(mods_root, conflict.name, conflict.staged_path, replace=True)

    assert sorted(p.name for p in mods_root.iterdir()) == ["CoolMod"]
    assert sorted(p.name for p in installed.iterdir()) == ["new.pak"]
