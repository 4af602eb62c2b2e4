"""Block index persistence: note upsert, block replacement, and block-type queries"""

import hashlib
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from noteblocks.core.models import Block, BlockType, Note
from noteblocks.crud.models import NoteBlockRow, NoteRecord


def text_hash(text: str) -> str:
    """Hex SHA-256 of the note text (64 chars, matches the String(64) column)."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def get_by_path(session: Session, path: str) -> NoteRecord | None:
    """Return the NoteRecord with the given path, or None if not indexed."""
    return session.exec(select(NoteRecord).where(NoteRecord.path == path)).one_or_none()


def _delete_blocks(session: Session, note_id) -> None:
    for row in session.exec(select(NoteBlockRow).where(NoteBlockRow.note_id == note_id)).all():
        session.delete(row)
    session.flush()


def _replace_blocks(session: Session, record: NoteRecord, blocks: list[Block]) -> None:
    """Delete all stored blocks of a note and insert the new ones in order."""
    _delete_blocks(session, record.id)
    for position, block in enumerate(blocks):
        session.add(NoteBlockRow(
            note_id=record.id,
            page=record.path,
            block_type=block.block_type,
            data=block.data,
            header_level=block.header_level,
            position=position,
            mtime=block.mtime,
        ))
    session.flush()


def commit_note(
    session: Session,
    note: Note,
    text: str,
    blocks: list[Block],
    indexed_at: datetime | None = None,
    ) -> tuple[NoteRecord, str]:
    """Upsert a note and its blocks.

    Returns (record, status) where status is 'created', 'updated', or 'unchanged'.
    A note is unchanged when both its text hash and mtime match the stored row.
    Flushes but does not commit; caller controls the transaction.
    """
    digest = text_hash(text)
    indexed_at = indexed_at or datetime.now()
    record = get_by_path(session, note.path)

    if record:
        if record.hash == digest and record.mtime == note.mtime:
            return record, 'unchanged'
        record.hash = digest
        record.mtime = note.mtime
        record.indexed_at = indexed_at
        session.add(record)
        session.flush()
        _replace_blocks(session, record, blocks)
        return record, 'updated'

    record = NoteRecord(path=note.path, mtime=note.mtime, hash=digest, indexed_at=indexed_at)
    session.add(record)
    session.flush()
    _replace_blocks(session, record, blocks)
    return record, 'created'


def _to_block(row: NoteBlockRow) -> Block:
    return Block(
        page=row.page,
        block_type=row.block_type,
        data=row.data,
        mtime=row.mtime,
        header_level=row.header_level,
    )


def get_blocks(
    session: Session,
    block_type: Optional[BlockType] = None,
    page: Optional[str] = None,
    ) -> list[Block]:
    """Return indexed blocks ordered by page then position, optionally filtered."""
    stmt = select(NoteBlockRow)
    if block_type is not None:
        stmt = stmt.where(NoteBlockRow.block_type == block_type)
    if page is not None:
        stmt = stmt.where(NoteBlockRow.page == page)
    stmt = stmt.order_by(NoteBlockRow.page, NoteBlockRow.position)
    return [_to_block(row) for row in session.exec(stmt).all()]


def list_pages(session: Session) -> list[str]:
    """Return the sorted paths of all indexed notes."""
    return sorted(session.exec(select(NoteRecord.path)).all())


def count_by_type(session: Session) -> dict[str, int]:
    """Return {block_type: count} for every type present in the index."""
    rows = session.exec(
        select(NoteBlockRow.block_type, func.count()).group_by(NoteBlockRow.block_type)
    ).all()
    return {BlockType(t).value: n for t, n in rows}


def prune_missing(session: Session, keep: set[str]) -> list[str]:
    """Delete notes (and their blocks) whose path is not in keep. Returns removed paths."""
    removed = []
    for record in session.exec(select(NoteRecord)).all():
        if record.path in keep:
            continue
        _delete_blocks(session, record.id)
        session.delete(record)
        removed.append(record.path)
    session.flush()
    return sorted(removed)
