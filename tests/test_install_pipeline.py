from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

from nmsmodmanager import archive_extractor, install_pipeline
from nmsmodmanager import (
    ArchiveError,
    CleanInstall,
    ConflictInstall,
    FailedInstall,
    FilesystemError,
    MessyInstall,
    OutcomeKind,
    UsageError,
    cleanup_staging,
    finalize_installation,
    install_archive,
)


def _temp_dirs(mods_root: Path) -> list[str]:
    return [p.name for p in mods_root.iterdir() if p.name.startswith(("temp_extract_", "temp_staging_"))]


def test_single_folder_installs_cleanly(mods_root: Path, make_zip) -> None:
    archive = make_zip("coolmod.zip", {"CoolMod/CoolMod.pak": "data"})

    report = install_archive(archive, mods_root)

    assert [s.name for s in report.successes] == ["CoolMod"]
    assert report.conflicts == []
    assert report.messy_path is None
    assert (mods_root / "CoolMod" / "CoolMod.pak").read_text() == "data"
    assert _temp_dirs(mods_root) == []


def test_outcomes_are_tagged(mods_root: Path, make_zip) -> None:
    (mods_root / "Old").mkdir()
    archive = make_zip("two.zip", {"New/a.pak": "1", "Old/b.pak": "2"})

    report = install_archive(archive, mods_root)

    kinds = {type(o).__name__: o.kind for o in report.outcomes}
    assert kinds == {"CleanInstall": OutcomeKind.CLEAN, "ConflictInstall": OutcomeKind.CONFLICT}


def test_existing_folder_is_reported_as_conflict(mods_root: Path, make_zip) -> None:
    installed = mods_root / "CoolMod"
    installed.mkdir()
    (installed / "old.pak").write_text("old")
    archive = make_zip("coolmod.zip", {"CoolMod/new.pak": "new", "Other/x.pak": "x"})

    report = install_archive(archive, mods_root)

    assert [c.name for c in report.conflicts] == ["CoolMod"]
    assert [s.name for s in report.successes] == ["Other"]
    staged = report.conflicts[0].staged_path
    assert (staged / "new.pak").read_text() == "new"
    assert staged.parent.name.startswith("temp_staging_")
    assert (installed / "old.pak").read_text() == "old"
    assert not (installed / "new.pak").exists()


def test_registered_name_counts_as_installed(mods_root: Path, make_zip) -> None:
    archive = make_zip("coolmod.zip", {"CoolMod/new.pak": "new"})

    report = install_archive(archive, mods_root, installed_names=["COOLMOD"])

    assert len(report.conflicts) == 1
    assert report.successes == []


def test_loose_files_make_a_messy_install(mods_root: Path, make_zip) -> None:
    archive = make_zip("loose.zip", {"readme.txt": "hi", "thing.pak": "x"})

    report = install_archive(archive, mods_root)

    assert report.successes == []
    assert report.conflicts == []
    messy = report.messy_path
    assert messy is not None and messy.parent == mods_root
    assert isinstance(report.outcomes[0], MessyInstall)
    assert sorted(p.name for p in messy.iterdir()) == ["readme.txt", "thing.pak"]


def test_metadata_and_empty_folders_are_not_candidates(mods_root: Path, make_zip) -> None:
    archive = make_zip(
        "mac.zip",
        {"__MACOSX/._thing.pak": "junk", "Empty/": "", "thing.pak": "x"},
    )

    report = install_archive(archive, mods_root)

    assert report.messy_path is not None
    assert not (mods_root / "__MACOSX").exists()


def test_loose_files_next_to_a_folder_are_discarded(mods_root: Path, make_zip) -> None:
    archive = make_zip("mixed.zip", {"Mod/a.pak": "a", "readme.txt": "hi"})

    report = install_archive(archive, mods_root)

    assert [s.name for s in report.successes] == ["Mod"]
    assert report.messy_path is None
    assert not (mods_root / "readme.txt").exists()
    assert _temp_dirs(mods_root) == []


def test_empty_archive_reports_nothing(mods_root: Path, make_zip) -> None:
    archive = make_zip("empty.zip", {})

    report = install_archive(archive, mods_root)

    assert report.is_empty
    assert _temp_dirs(mods_root) == []


def test_corrupt_archive_fails_without_leftovers(mods_root: Path, tmp_path: Path) -> None:
    archive = tmp_path / "broken.zip"
    archive.write_bytes(b"definitely not a zip")

    with pytest.raises(ArchiveError):
        install_archive(archive, mods_root)
    assert list(mods_root.iterdir()) == []


def test_unsupported_archive_type(mods_root: Path, tmp_path: Path) -> None:
    archive = tmp_path / "mod.tar"
    archive.write_bytes(b"")
    with pytest.raises(ArchiveError):
        install_archive(archive, mods_root)


def test_entries_escaping_the_staging_folder_are_rejected(mods_root: Path, make_zip) -> None:
    archive = make_zip("evil.zip", {"../evil.txt": "x"})
    with pytest.raises(ArchiveError):
        install_archive(archive, mods_root)
    assert list(mods_root.iterdir()) == []


def test_each_archive_gets_its_own_staging_folder(mods_root: Path, make_zip) -> None:
    first = install_archive(make_zip("a.zip", {"a.txt": "1"}), mods_root)
    second = install_archive(make_zip("b.zip", {"b.txt": "2"}), mods_root)
    assert first.messy_path != second.messy_path


def test_finalize_moves_staged_tree_under_chosen_name(mods_root: Path, make_zip) -> None:
    report = install_archive(make_zip("loose.zip", {"thing.pak": "x"}), mods_root)

    destination = finalize_installation(report.messy_path, "Renamed", mods_root)

    assert destination == mods_root / "Renamed"
    assert (destination / "thing.pak").read_text() == "x"
    assert not report.messy_path.exists()


def test_finalize_refuses_existing_destination(mods_root: Path, make_zip) -> None:
    (mods_root / "Taken").mkdir()
    report = install_archive(make_zip("loose.zip", {"thing.pak": "x"}), mods_root)
    with pytest.raises(FilesystemError):
        finalize_installation(report.messy_path, "Taken", mods_root)
    assert report.messy_path.exists()


def test_finalize_rejects_bad_names_and_missing_staging(mods_root: Path) -> None:
    with pytest.raises(UsageError):
        finalize_installation(mods_root / "whatever", "a/b", mods_root)
    with pytest.raises(FilesystemError):
        finalize_installation(mods_root / "missing", "Fine", mods_root)


def test_cleanup_removes_staged_tree_and_empty_parent(mods_root: Path, make_zip) -> None:
    (mods_root / "CoolMod").mkdir()
    report = install_archive(make_zip("c.zip", {"CoolMod/x.pak": "x"}), mods_root)
    staged = report.conflicts[0].staged_path

    cleanup_staging(staged)

    assert not staged.exists()
    assert not staged.parent.exists()
    cleanup_staging(staged)


def test_report_variants_are_distinct_types(mods_root: Path, make_zip) -> None:
    report = install_archive(make_zip("one.zip", {"One/x.pak": "x"}), mods_root)
    [outcome] = report.outcomes
    assert isinstance(outcome, CleanInstall)
    assert not isinstance(outcome, ConflictInstall)


def test_damaged_compressed_data_fails_without_leftovers(mods_root: Path, tmp_path: Path) -> None:
    archive = tmp_path / "damaged.zip"
    with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as handle:
        handle.writestr("Mod/data.pak", "the quick brown fox jumps over the lazy dog " * 400)
    with zipfile.ZipFile(archive) as handle:
        info = handle.getinfo("Mod/data.pak")
    raw = bytearray(archive.read_bytes())
    data_start = 30 + len(info.filename.encode()) + len(info.extra)
    middle = data_start + info.compress_size // 2
    for offset in range(middle, middle + 8):
        raw[offset] ^= 0xFF
    archive.write_bytes(bytes(raw))

    with pytest.raises(ArchiveError):
        install_archive(archive, mods_root)
    assert list(mods_root.iterdir()) == []


def test_unexpected_reader_errors_become_archive_errors(
    mods_root: Path, make_zip, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _encrypted(archive: Path, target: Path) -> None:
        (target / "partial.pak").write_text("x")
        raise RuntimeError("File is encrypted, password required for extraction")

    monkeypatch.setitem(archive_extractor._EXTRACTORS, ".zip", _encrypted)
    with pytest.raises(ArchiveError):
        install_archive(make_zip("locked.zip", {"Mod/a.pak": "a"}), mods_root)
    assert list(mods_root.iterdir()) == []


def test_one_failed_candidate_does_not_stop_the_others(
    mods_root: Path, make_zip, monkeypatch: pytest.MonkeyPatch
) -> None:
    real_move = install_pipeline.move_tree

    def _move(source: Path, destination: Path) -> Path:
        if source.name == "Alpha":
            raise FilesystemError(source, "Failed to move folder: permission denied")
        return real_move(source, destination)

    monkeypatch.setattr(install_pipeline, "move_tree", _move)
    report = install_archive(make_zip("two.zip", {"Alpha/a.pak": "a", "Beta/b.pak": "b"}), mods_root)

    assert [f.name for f in report.failures] == ["Alpha"]
    assert isinstance(report.failures[0], FailedInstall)
    assert [s.name for s in report.successes] == ["Beta"]
    assert (mods_root / "Beta" / "b.pak").exists()
    assert _temp_dirs(mods_root) == []
