"""Shared fixtures for crud unit tests"""

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

from noteblocks.core.models import Note
from noteblocks.core.segment import segment
from noteblocks.core.pipeline import stamp
from noteblocks.crud.blocks import commit_note


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="note")
def note_fixture():
    return Note(path="docs/note.md", mtime=datetime(2024, 5, 1, 9, 30))


NOTE_TEXT = "# Title\nbody\n---\n> tip\n- [ ] task\n[[Other]]\n"


@pytest.fixture(name="note_text")
def note_text_fixture():
    return NOTE_TEXT


@pytest.fixture(name="committed")
def committed_fixture(session, note):
    """The sample note committed with its segmented blocks."""
    record, _ = commit_note(session, note, NOTE_TEXT, stamp(segment(NOTE_TEXT), note))
    return record
