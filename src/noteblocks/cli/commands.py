"""CLI command implementations"""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlmodel import Session

from noteblocks.config import Settings, load_config
from noteblocks.core.export import blocks_to_json
from noteblocks.core.models import BlockType
from noteblocks.core.pipeline import run_export, run_index, segment_notes
from noteblocks.core.sources import VaultSource
from noteblocks.crud.blocks import count_by_type, get_blocks, list_pages
from noteblocks.crud.database import init_db, make_engine, reset_db


TypeOption = Annotated[Optional[BlockType], typer.Option("--type", "-t", help="Only blocks of this type")]
PageOption = Annotated[Optional[str], typer.Option("--page", "-p", help="Only blocks of this note path")]
DbOption = Annotated[Optional[str], typer.Option("--db-url", help="Database URL (or set NOTEBLOCKS_DB_URL)")]


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _preview(data: str, width: int = 72) -> str:
    line = data.split('\n', 1)[0]
    return line if len(line) <= width else line[:width - 3] + "..."


def configure_logging(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    ):
    """Segment notes into typed blocks (callout, code, header, mention, todo, done)."""
    level = "DEBUG" if verbose else _settings().log_level
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def segment_cmd(
    path: Annotated[str, typer.Argument(help="Note file to segment")],
    block_type: TypeOption = None,
    ):
    """Print the blocks of a single note as JSON."""
    note_path = Path(path)
    if not note_path.is_file():
        _fail(f"Note not found: {path}")
    source = VaultSource(note_path, extensions=(note_path.suffix.lower(),))
    batch = segment_notes(source)
    if batch.skipped:
        _fail(f"Could not read {path}: {batch.skipped[0][1]}")
    blocks = [b for b in batch.blocks if block_type is None or b.block_type == block_type]
    typer.echo(json.dumps(blocks_to_json(blocks), indent=2, ensure_ascii=False))


def index_cmd(
    vault: Annotated[Optional[str], typer.Argument(help="Vault directory (defaults to vault_dir)")] = None,
    db_url: DbOption = None,
    extensions: Annotated[Optional[str], typer.Option("--ext", help="Comma-separated note extensions")] = None,
    prune: Annotated[bool, typer.Option("--prune/--no-prune", help="Drop notes no longer in the vault")] = True,
    ):
    """Segment every note in the vault and commit its blocks to the index."""
    settings = _settings(overrides={"vault_dir": vault, "db_url": db_url, "extensions": extensions})
    root = Path(settings.vault_dir)
    if not root.exists():
        _fail(f"Vault not found: {root}")
    engine = make_engine(settings.db_url)
    init_db(engine)

    try:
        counts, changes, batch = run_index(engine, VaultSource(root, settings.extension_list), prune=prune)
    except Exception as e:
        _fail("Index failed", e)
    for status, path in changes:
        typer.echo(f"  {status}: {path}")
    for path, reason in batch.skipped:
        typer.echo(f"  skipped: {path} ({reason})")
    typer.echo(
        f"Index complete - "
        f"{counts['created']} created, "
        f"{counts['updated']} updated, "
        f"{counts['unchanged']} unchanged, "
        f"{counts['removed']} removed, "
        f"{len(batch.blocks)} block(s)"
    )


def query_cmd(
    block_type: TypeOption = None,
    page: PageOption = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print full blocks as JSON")] = False,
    counts: Annotated[bool, typer.Option("--counts", help="Print block counts per type")] = False,
    pages: Annotated[bool, typer.Option("--pages", help="Print the paths of indexed notes")] = False,
    db_url: DbOption = None,
    ):
    """Print indexed blocks, optionally filtered by type and note."""
    settings = _settings(overrides={"db_url": db_url})
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        if counts:
            for name, n in count_by_type(session).items():
                typer.echo(f"{name}: {n}")
            return
        if pages:
            for path in list_pages(session):
                typer.echo(path)
            return
        blocks = get_blocks(session, block_type=block_type, page=page)

    if not blocks:
        typer.echo("No blocks found.")
        raise typer.Exit(1)
    if as_json:
        typer.echo(json.dumps(blocks_to_json(blocks), indent=2, ensure_ascii=False))
        return
    for b in blocks:
        typer.echo(f"{b.page}\t{b.block_type.value}\t{_preview(b.data)}")


def export_cmd(
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    fmt: Annotated[Optional[str], typer.Option("--format", help="json or md")] = None,
    block_type: TypeOption = None,
    page: PageOption = None,
    db_url: DbOption = None,
    ):
    """Write indexed blocks to the output directory as JSON or a markdown digest."""
    settings = _settings(overrides={"output_dir": out, "output_format": fmt, "db_url": db_url})
    engine = make_engine(settings.db_url)
    init_db(engine)
    try:
        with Session(engine) as session:
            path, n = run_export(session, Path(settings.output_dir), settings.output_format, block_type, page)
    except Exception as e:
        _fail("Export failed", e)
    typer.echo(f"Exported {n} block(s) to {path}")


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    db_url: DbOption = None,
    ):
    """Initialize the index schema. Use --reset to clear existing data."""
    settings = _settings(overrides={"db_url": db_url})
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing data cleared.")
    else:
        init_db(engine)
    typer.echo(f"Index initialized at: {settings.db_url}")
