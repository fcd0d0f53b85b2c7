"""
Shared fixtures: a realistic GCMODSETTINGS.MXML, a session bound to a
temporary copy of it, and a helper that builds zip archives on the fly.
"""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Callable, Dict

import pytest

from nmsmodmanager import ModRegistry, SettingsSession

SAMPLE_SETTINGS = """<?xml version="1.0" encoding="utf-8"?>
<Data template="GcModSettings">
  <Property name="DisableAllMods" value="false" />
  <Property name="Data">
    <Property name="Data" value="GcModSettingsInfo" _index="0">
      <Property name="Name" value="BETTER &amp; BRIGHTER" />
      <Property name="Author" value="Someone" />
      <Property name="ID" value="123" />
      <Property name="AuthorID" value="456" />
      <Property name="LastUpdated" value="0" />
      <Property name="ModPriority" value="1" />
      <Property name="Enabled" value="true" />
      <Property name="EnabledVR" value="true" />
      <Property name="Dependencies" />
    </Property>
    <Property name="Data" value="GcModSettingsInfo" _index="1">
      <Property name="Name" value="FASTER WARP" />
      <Property name="Author" value="" />
      <Property name="ID" value="0" />
      <Property name="AuthorID" value="0" />
      <Property name="LastUpdated" value="0" />
      <Property name="ModPriority" value="0" />
      <Property name="Enabled" value="false" />
      <Property name="EnabledVR" value="false" />
      <Property name="Dependencies" />
    </Property>
  </Property>
</Data>"""

EMPTY_SETTINGS = """<?xml version="1.0" encoding="utf-8"?>
<Data template="GcModSettings">
  <Property name="DisableAllMods" value="false" />
  <Property name="Data" />
</Data>"""


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    path = tmp_path / "SETTINGS" / "GCMODSETTINGS.MXML"
    path.parent.mkdir(parents=True)
    path.write_text(SAMPLE_SETTINGS, encoding="utf-8")
    return path


@pytest.fixture
def empty_settings_file(tmp_path: Path) -> Path:
    path = tmp_path / "SETTINGS" / "GCMODSETTINGS.MXML"
    path.parent.mkdir(parents=True)
    path.write_text(EMPTY_SETTINGS, encoding="utf-8")
    return path


@pytest.fixture
def registry(settings_file: Path) -> ModRegistry:
    return ModRegistry(SettingsSession.load(settings_file))


@pytest.fixture
def empty_registry(empty_settings_file: Path) -> ModRegistry:
    return ModRegistry(SettingsSession.load(empty_settings_file))


@pytest.fixture
def mods_root(tmp_path: Path) -> Path:
    root = tmp_path / "GAMEDATA" / "MODS"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def make_zip(tmp_path: Path) -> Callable[[str, Dict[str, str]], Path]:
    archives = tmp_path / "downloads"
    archives.mkdir()

    def _make(name: str, members: Dict[str, str]) -> Path:
        path = archives / name
        with zipfile.ZipFile(path, "w") as handle:
            for member, content in members.items():
                handle.writestr(member, content)
        return path

    return _make
