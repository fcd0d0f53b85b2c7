"""
Locate the No Man's Sky install and the folders the manager edits.

Steam installs are found through libraryfolders.vdf and the game's app
manifest; GOG installs through the Windows registry.
"""

from __future__ import annotations

import re
import sys
from pathlib import Path

STEAM_APP_ID = "275850"
GOG_GAME_ID = "1446223351"
SETTINGS_RELATIVE = Path("Binaries") / "SETTINGS" / "GCMODSETTINGS.MXML"
MODS_RELATIVE = Path("GAMEDATA") / "MODS"

_HOME = Path.home()

_STEAM_CANDIDATES: list[Path] = [
    _HOME / ".local" / "share" / "Steam",
    _HOME / ".var" / "app" / "com.valvesoftware.Steam" / ".local" / "share" / "Steam",
    _HOME / "snap" / "steam" / "common" / ".local" / "share" / "Steam",
    _HOME / ".steam" / "steam",
]

_VDF_PATH_PATTERN = re.compile(r'"path"\s+"([^"]+)"')
_INSTALLDIR_PATTERN = re.compile(r'"installdir"\s+"([^"]+)"')


def _read_registry_value(key_path: str, value_name: str) -> str | None:
    if sys.platform != "win32":
        return None
    import winreg

    try:
        with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, key_path) as key:
            value, _ = winreg.QueryValueEx(key, value_name)
    except OSError:
        return None
    return str(value)


def steam_roots() -> list[Path]:
    roots: list[Path] = []
    registry_root = _read_registry_value(r"SOFTWARE\WOW6432Node\Valve\Steam", "InstallPath")
    if registry_root:
        roots.append(Path(registry_root))
    roots.extend(root for root in _STEAM_CANDIDATES if root.is_dir())
    return roots


def parse_library_folders(vdf_path: Path) -> list[Path]:
    """Return every existing library root listed in libraryfolders.vdf."""
    libraries: list[Path] = []
    try:
        text = vdf_path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return libraries
    for match in _VDF_PATH_PATTERN.finditer(text):
        library = Path(match.group(1).replace("\\\\", "\\"))
        if library.is_dir():
            libraries.append(library)
    return libraries


def find_steam_path() -> Path | None:
    seen: set[Path] = set()
    for root in steam_roots():
        libraries = [root, *parse_library_folders(root / "steamapps" / "libraryfolders.vdf")]
        for library in libraries:
            if library in seen:
                continue
            seen.add(library)
            manifest = library / "steamapps" / f"appmanifest_{STEAM_APP_ID}.acf"
            try:
                content = manifest.read_text(encoding="utf-8", errors="replace")
            except OSError:
                continue
            match = _INSTALLDIR_PATTERN.search(content)
            if not match:
                continue
            game_path = library / "steamapps" / "common" / match.group(1)
            if game_path.is_dir():
                return game_path
    return None


def find_gog_path() -> Path | None:
    raw = _read_registry_value(rf"SOFTWARE\WOW6432Node\GOG.com\Games\{GOG_GAME_ID}", "PATH")
    if not raw:
        return None
    game_path = Path(raw)
    if (game_path / "Binaries").is_dir():
        return game_path
    return None


def find_game_path(override: Path | None = None) -> Path | None:
    if override is not None:
        return override if override.is_dir() else None
    return find_steam_path() or find_gog_path()


def settings_file_path(game_path: Path) -> Path:
    return game_path / SETTINGS_RELATIVE


def mods_path(game_path: Path) -> Path:
    return game_path / MODS_RELATIVE
