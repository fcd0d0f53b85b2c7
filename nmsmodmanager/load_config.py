from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import toml

from .logging_utils import log_warn

DEFAULT_DATABASE_URL = (
    "https://raw.githubusercontent.com/Syzzle07/NMS-Mod-Manager/"
    "refs/heads/nms-mod-manager-redesign/modsdatabase/mod_database.json"
)


@dataclass(slots=True)
class ProgramConfig:
    game_path: Path | None = None
    settings_file: Path | None = None
    mods_dir: Path | None = None
    backup_dir: Path | None = None
    database_url: str = DEFAULT_DATABASE_URL
    database_cache: Path = Path("mod_database_cache.json")
    log_level: str = "info"
    strict_reorder: bool = True


def _optional_path(raw: object, base: Path) -> Path | None:
    if raw in (None, ""):
        return None
    path = Path(str(raw)).expanduser()
    if not path.is_absolute():
        path = base / path
    return path


def load_program_config(config_path: Path) -> ProgramConfig:
    """Load the program configuration TOML file.

    Every key is optional. Relative paths are resolved against the folder
    holding the config file. A missing file yields the defaults.
    """

    config = ProgramConfig()
    if not config_path.exists():
        log_warn(f"Config file {config_path} not found. Proceeding with defaults.")
        return config

    raw_text = config_path.read_text(encoding="utf-8")
    try:
        data = toml.loads(raw_text)
    except toml.TomlDecodeError as exc:
        raise ValueError(f"Invalid TOML in config file: {config_path}") from exc

    base = config_path.parent
    paths = data.get("paths", {})
    config.game_path = _optional_path(paths.get("game"), base)
    config.settings_file = _optional_path(paths.get("settings_file"), base)
    config.mods_dir = _optional_path(paths.get("mods_dir"), base)
    config.backup_dir = _optional_path(paths.get("backup_dir"), base)

    database = data.get("database", {})
    config.database_url = str(database.get("url", config.database_url))
    config.database_cache = _optional_path(database.get("cache"), base) or base / config.database_cache

    config.log_level = str(data.get("log_level", config.log_level))
    config.strict_reorder = bool(data.get("strict_reorder", config.strict_reorder))
    return config
