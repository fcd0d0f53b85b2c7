from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Iterable, List

from .archive_extractor import EXTRACT_PREFIX, extract_archive
from .errors import FilesystemError, UsageError
from .file_utils import ensure_directory, has_files, move_tree, remove_if_empty, remove_tree
from .logging_utils import log_info, log_warn
from .models import CleanInstall, ConflictInstall, FailedInstall, InstallReport, MessyInstall
from .text_utils import is_valid_folder_name, name_key

STAGING_PREFIX = "temp_staging_"
IGNORED_FOLDERS = {"__macosx"}


def discover_candidates(extract_dir: Path) -> List[Path]:
	"""Return the top-level folders of an extracted archive that look like mods."""

	candidates: List[Path] = []
	for entry in sorted(extract_dir.iterdir(), key=lambda p: p.name.lower()):
		if not entry.is_dir():
			continue
		if entry.name.lower() in IGNORED_FOLDERS or entry.name.startswith("."):
			continue
		if not has_files(entry):
			continue
		candidates.append(entry)
	return candidates


def find_installed_folder(mods_root: Path, name: str) -> Path | None:
	"""Return the installed folder for ``name``, matching case-insensitively."""

	exact = mods_root / name
	if exact.is_dir():
		return exact
	if not mods_root.is_dir():
		return None
	key = name_key(name)
	for entry in mods_root.iterdir():
		if entry.name.startswith((".", EXTRACT_PREFIX, STAGING_PREFIX)) or not entry.is_dir():
			continue
		if name_key(entry.name) == key:
			return entry
	return None


def _is_installed(name: str, mods_root: Path, installed_keys: set[str]) -> bool:
	if find_installed_folder(mods_root, name) is not None:
		return True
	return name_key(name) in installed_keys


def install_archive(
	archive: Path,
	mods_root: Path,
	installed_names: Iterable[str] = (),
) -> InstallReport:
	"""Extract an archive and sort its folders into clean installs and conflicts.

	Clean folders land in ``mods_root`` right away. Conflicting folders wait
	in a staging folder for a replace/keep decision. An archive with files
	but no usable folder is handed back whole as a messy install so the
	caller can pick a name. Unreadable archives raise ArchiveError before
	anything is moved.
	"""

	ensure_directory(mods_root)
	report = InstallReport(archive=archive)
	extract_dir = extract_archive(archive, mods_root)

	candidates = discover_candidates(extract_dir)
	if not candidates:
		if has_files(extract_dir):
			log_warn(f"No mod folder found in {archive.name}; a name is needed.")
			report.add(MessyInstall(staged_path=extract_dir))
		else:
			log_warn(f"{archive.name} is empty.")
			remove_tree(extract_dir)
		return report

	installed_keys = {name_key(name) for name in installed_names}
	staging_dir: Path | None = None
	for candidate in candidates:
		mod_name = candidate.name
		try:
			if _is_installed(mod_name, mods_root, installed_keys):
				if staging_dir is None:
					staging_dir = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=mods_root))
				staged = move_tree(candidate, staging_dir / mod_name)
				report.add(ConflictInstall(name=mod_name, staged_path=staged))
				log_warn(f"'{mod_name}' is already installed; staged for review.", indent=2)
			else:
				final_path = move_tree(candidate, mods_root / mod_name)
				report.add(CleanInstall(name=mod_name, path=final_path))
				log_info(f"Installed '{mod_name}'.", indent=2)
		except (FilesystemError, OSError) as exc:
			report.add(FailedInstall(name=mod_name, error=str(exc)))
			log_warn(f"Could not install '{mod_name}': {exc}", indent=2)

	leftovers = [item.name for item in extract_dir.iterdir()]
	if leftovers:
		log_info(f"Discarding loose archive entries: {', '.join(sorted(leftovers))}", indent=2)
	try:
		remove_tree(extract_dir)
	except FilesystemError as exc:
		log_warn(str(exc), indent=2)
	return report


def finalize_installation(staging_path: Path, name: str, mods_root: Path) -> Path:
	"""Move a staged tree into the mods folder under the chosen name."""

	chosen = name.strip()
	if not is_valid_folder_name(chosen):
		raise UsageError(f"Invalid mod folder name: {name!r}")
	if not staging_path.exists():
		raise FilesystemError(staging_path, "Temporary installation folder not found")
	destination = mods_root / chosen
	if destination.exists():
		raise FilesystemError(destination, f"A mod folder named '{chosen}' already exists")
	parent = staging_path.parent
	ensure_directory(mods_root)
	move_tree(staging_path, destination)
	if parent != mods_root and parent.name.startswith(STAGING_PREFIX):
		remove_if_empty(parent)
	log_info(f"Installed '{chosen}'.")
	return destination


def cleanup_staging(path: Path) -> None:
	"""Discard a staged tree. Missing paths are ignored."""

	parent = path.parent
	remove_tree(path)
	if parent.name.startswith(STAGING_PREFIX):
		remove_if_empty(parent)


__all__ = [
	"discover_candidates",
	"find_installed_folder",
	"install_archive",
	"finalize_installation",
	"cleanup_staging",
]
