"""Pipeline step functions: per-note segmentation, indexing, and export orchestration"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlmodel import Session

from noteblocks.core.export import write_blocks
from noteblocks.core.models import Block, BlockType, Note
from noteblocks.core.segment import segment
from noteblocks.core.sources import NoteReadError, NoteSource
from noteblocks.crud.blocks import commit_note, get_blocks, prune_missing


logger = logging.getLogger(__name__)


@dataclass
class NoteBatch:
    """Blocks aggregated across notes, plus the notes that had to be skipped."""
    blocks: list[Block] = field(default_factory=list)
    texts: dict[str, str] = field(default_factory=dict)
    skipped: list[tuple[str, str]] = field(default_factory=list)   # (path, reason)


def stamp(blocks: list[Block], note: Note) -> list[Block]:
    """Return copies of blocks carrying the note's path and modification time."""
    return [b.model_copy(update={"page": note.path, "mtime": note.mtime}) for b in blocks]


def _read(source: NoteSource, note: Note) -> tuple[Optional[str], str]:
    """Return (text, reason); text is None when the note must be skipped."""
    try:
        text = source.read_text(note.path)
    except NoteReadError as e:
        return None, str(e)
    return text, "" if text is not None else "not found"


def segment_notes(source: NoteSource, notes: Optional[list[Note]] = None) -> NoteBatch:
    """Segment every note, stamp page/mtime, and aggregate in note order.

    Missing or unreadable notes are logged and recorded in ``skipped``; they
    never abort the batch.
    """
    batch = NoteBatch()
    for note in source.list_notes() if notes is None else notes:
        text, reason = _read(source, note)
        if text is None:
            logger.warning("Skipping %s: %s", note.path, reason)
            batch.skipped.append((note.path, reason))
            continue
        blocks = stamp(segment(text), note)
        logger.debug("%s: %d block(s)", note.path, len(blocks))
        batch.texts[note.path] = text
        batch.blocks.extend(blocks)
    return batch


def run_index(engine, source: NoteSource, prune: bool = True) -> tuple[dict[str, int], list[tuple[str, str]], NoteBatch]:
    """Segment all notes from source and commit their blocks to the index.

    Returns (counts, changes, batch) where changes lists (status, path) for
    created/updated/removed notes.
    """
    notes = source.list_notes()
    batch = segment_notes(source, notes)
    by_page: dict[str, list[Block]] = {}
    for block in batch.blocks:
        by_page.setdefault(block.page, []).append(block)

    indexed_at = datetime.now()
    counts = {"created": 0, "updated": 0, "unchanged": 0, "removed": 0}
    changes = []
    with Session(engine) as session:
        for note in notes:
            if note.path not in batch.texts:
                continue
            _, status = commit_note(
                session, note, batch.texts[note.path], by_page.get(note.path, []), indexed_at,
            )
            counts[status] += 1
            if status != 'unchanged':
                changes.append((status, note.path))
        if prune:
            # Skipped notes still exist on disk; keep their previously indexed blocks.
            keep = {n.path for n in notes}
            for path in prune_missing(session, keep):
                counts["removed"] += 1
                changes.append(("removed", path))
        session.commit()
    logger.info(
        "Indexed %d note(s): %s", len(notes),
        ", ".join(f"{k}={v}" for k, v in counts.items()),
    )
    return counts, changes, batch


def run_export(
    session: Session,
    output_dir: Path,
    fmt: str,
    block_type: Optional[BlockType] = None,
    page: Optional[str] = None,
    ) -> tuple[Path, int]:
    """Write indexed blocks (optionally filtered) to output_dir. Returns (path, block_count)."""
    blocks = get_blocks(session, block_type=block_type, page=page)
    return write_blocks(blocks, output_dir, fmt), len(blocks)
