from __future__ import annotations

from pathlib import Path

from .document import Document
from .errors import PersistError
from .file_utils import backup_file, write_text_file
from .logging_utils import log_debug, log_warn
from .mxml_parser import load_document, parse_document
from .mxml_writer import serialize_document


class SettingsSession:
    """Owns the loaded settings Document and writes it back.

    One session per settings file; the caller holding it is the only
    writer. The document is never reset on a failed save, so a retry only
    needs another ``save()``.
    """

    def __init__(self, document: Document, path: Path | None = None, backup_dir: Path | None = None) -> None:
        self.document = document
        self.path = path
        self.backup_dir = backup_dir
        self._backed_up = False

    @classmethod
    def load(cls, path: Path, backup_dir: Path | None = None) -> "SettingsSession":
        return cls(load_document(path), path=path, backup_dir=backup_dir)

    @classmethod
    def from_text(cls, text: str, path: Path | None = None) -> "SettingsSession":
        return cls(parse_document(text), path=path)

    def reload(self) -> None:
        if self.path is None:
            raise PersistError(Path("."), "Session has no settings file to reload")
        self.document = load_document(self.path)

    def serialize(self) -> str:
        return serialize_document(self.document)

    def _backup_once(self) -> None:
        if self._backed_up or self.backup_dir is None or self.path is None:
            return
        if self.path.exists():
            try:
                backup_file(self.path, self.backup_dir)
            except OSError as exc:
                log_warn(f"Could not back up {self.path}: {exc}")
        self._backed_up = True

    def save(self) -> str:
        """Serialize the whole document and persist it. Returns the text."""
        content = self.serialize()
        if self.path is None:
            return content
        self._backup_once()
        try:
            write_text_file(self.path, content)
        except OSError as exc:
            raise PersistError(self.path, f"Failed to write settings file: {exc}") from exc
        log_debug(f"Saved {self.path}")
        return content
