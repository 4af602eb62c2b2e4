"""Note sources: enumerate notes with their mtime and read their text"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from noteblocks.core.models import Note


logger = logging.getLogger(__name__)


class NoteReadError(Exception):
    """A note exists but its content could not be read."""


class NoteSource(ABC):
    @abstractmethod
    def list_notes(self) -> list[Note]:
        """Return every note this source holds, in a stable order."""
        raise NotImplementedError

    @abstractmethod
    def read_text(self, path: str) -> str | None:
        """Return the note text, or None when no such note exists."""
        raise NotImplementedError


def _is_hidden(rel: Path) -> bool:
    """True for anything under a dot-directory (.obsidian, .trash, .git)."""
    return any(part.startswith('.') for part in rel.parts[:-1])


@dataclass
class VaultSource(NoteSource):
    """Notes stored as files under a vault directory, identified by POSIX relative path."""
    root: Path
    extensions: tuple[str, ...] = ('.md',)

    def list_notes(self) -> list[Note]:
        root = Path(self.root)
        if root.is_file():
            return [_note_for(root, root.name)] if root.suffix.lower() in self.extensions else []
        notes = []
        for p in sorted(root.rglob('*')):
            rel = p.relative_to(root)
            if p.is_file() and p.suffix.lower() in self.extensions and not _is_hidden(rel):
                notes.append(_note_for(p, rel.as_posix()))
        return notes

    def resolve(self, path: str) -> Path:
        root = Path(self.root)
        return root if root.is_file() else root / path

    def read_text(self, path: str) -> str | None:
        p = self.resolve(path)
        if not p.is_file():
            logger.debug("Note not found: %s", path)
            return None
        try:
            return p.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise NoteReadError(f"Failed to read {path}: {e}") from e


def _note_for(path: Path, identifier: str) -> Note:
    return Note(path=identifier, mtime=datetime.fromtimestamp(path.stat().st_mtime))


@dataclass
class MemorySource(NoteSource):
    """In-memory notes keyed by identifier; mtimes default to the time of insertion."""
    _texts: dict[str, str] = field(default_factory=dict)
    _mtimes: dict[str, datetime] = field(default_factory=dict)

    def add(self, path: str, text: str, mtime: datetime | None = None) -> Note:
        self._texts[path] = text
        self._mtimes[path] = mtime or datetime.now()
        return Note(path=path, mtime=self._mtimes[path])

    def list_notes(self) -> list[Note]:
        return [Note(path=p, mtime=self._mtimes[p]) for p in sorted(self._texts)]

    def read_text(self, path: str) -> str | None:
        return self._texts.get(path)
