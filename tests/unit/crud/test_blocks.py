"""Unit tests for crud/blocks.py"""

from datetime import datetime

from sqlmodel import select

from noteblocks.core.models import Block, BlockType, Note
from noteblocks.crud.blocks import (
    commit_note, count_by_type, get_blocks, get_by_path, list_pages, prune_missing, text_hash,
)
from noteblocks.crud.models import NoteBlockRow, NoteRecord


# --- text_hash ---

def test_text_hash_is_64_hex_chars():
    digest = text_hash("# Title")
    assert len(digest) == 64
    assert digest == text_hash("# Title")
    assert digest != text_hash("# Title ")


# --- commit_note ---

def test_commit_note_created(session, note, committed):
    """A new note is stored with its hash, mtime, and ordered blocks."""
    assert committed.path == "docs/note.md"
    assert committed.mtime == note.mtime
    rows = session.exec(
        select(NoteBlockRow).where(NoteBlockRow.note_id == committed.id).order_by(NoteBlockRow.position)
    ).all()
    assert [r.block_type for r in rows] == [
        BlockType.header, BlockType.callout, BlockType.todo, BlockType.mention,
    ]
    assert [r.position for r in rows] == [0, 1, 2, 3]
    assert rows[0].header_level == 1
    assert all(r.page == "docs/note.md" for r in rows)


def test_commit_note_unchanged(session, note, note_text, committed):
    """Same text and mtime leaves the stored note alone."""
    record, status = commit_note(session, note, note_text, [])
    assert status == "unchanged"
    assert record.id == committed.id
    assert len(get_blocks(session)) == 4


def test_commit_note_updated_replaces_blocks(session, note, committed):
    """Changed text replaces every stored block of the note."""
    blocks = [Block(page=note.path, block_type=BlockType.done, data="- [x] task", mtime=note.mtime)]
    record, status = commit_note(session, note, "- [x] task", blocks)
    assert status == "updated"
    assert record.id == committed.id
    assert [(b.block_type, b.data) for b in get_blocks(session)] == [(BlockType.done, "- [x] task")]


def test_commit_note_mtime_change_is_update(session, note, note_text, committed):
    """A touched note with identical text is re-indexed with the new mtime."""
    touched = Note(path=note.path, mtime=datetime(2024, 6, 1))
    _, status = commit_note(session, touched, note_text, [])
    assert status == "updated"
    assert get_by_path(session, note.path).mtime == datetime(2024, 6, 1)


# --- queries ---

def test_get_by_path_missing(session):
    assert get_by_path(session, "nope.md") is None


def test_get_blocks_filters(session, committed):
    todos = get_blocks(session, block_type=BlockType.todo)
    assert [b.data for b in todos] == ["- [ ] task"]
    assert todos[0].page == "docs/note.md"
    assert todos[0].mtime == datetime(2024, 5, 1, 9, 30)
    assert get_blocks(session, page="other.md") == []


def test_get_blocks_orders_by_page_then_position(session, committed):
    other = Note(path="a.md", mtime=datetime(2024, 1, 1))
    commit_note(session, other, "> a", [Block(page="a.md", block_type=BlockType.callout, data="> a")])
    pages = [b.page for b in get_blocks(session)]
    assert pages == ["a.md"] + ["docs/note.md"] * 4


def test_list_pages_and_counts(session, committed):
    assert list_pages(session) == ["docs/note.md"]
    assert count_by_type(session) == {"callout": 1, "header": 1, "mention": 1, "todo": 1}


def test_prune_missing(session, committed):
    """Notes outside the keep set are removed together with their blocks."""
    assert prune_missing(session, {"docs/note.md"}) == []
    assert prune_missing(session, set()) == ["docs/note.md"]
    assert session.exec(select(NoteRecord)).all() == []
    assert session.exec(select(NoteBlockRow)).all() == []
