"""Export: serialize blocks as JSON or a markdown digest grouped by block type"""

import json
from pathlib import Path

from noteblocks.core.models import Block, BlockType


EXPORT_FORMATS = ('json', 'md')


def blocks_to_json(blocks: list[Block]) -> list[dict]:
    """Return JSON-ready dicts (enum values as strings, mtime as ISO 8601)."""
    return [b.model_dump(mode='json') for b in blocks]


def _first_line(data: str) -> str:
    return data.split('\n', 1)[0].strip()


def build_digest(blocks: list[Block]) -> str:
    """Build a markdown digest: one section per block type present, in BlockType order.

    Each entry links back to its note, e.g. ``- [[daily/2024-05-01.md]]: - [ ] buy milk``.
    """
    parts = []
    for block_type in BlockType:
        entries = [b for b in blocks if b.block_type == block_type]
        if not entries:
            continue
        lines = [f"## {block_type.value}", ""]
        lines += [f"- [[{b.page}]]: {_first_line(b.data)}" if b.page else f"- {_first_line(b.data)}"
                  for b in entries]
        parts.append("\n".join(lines))
    return "\n\n".join(parts) + "\n" if parts else ""


def write_blocks(blocks: list[Block], output_dir: Path, fmt: str = 'json') -> Path:
    """Write blocks to output_dir/blocks.{json|md} and return the written path."""
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt!r} (expected one of {', '.join(EXPORT_FORMATS)})")
    output_dir.mkdir(parents=True, exist_ok=True)
    out = output_dir / f"blocks.{fmt}"
    if fmt == 'json':
        out.write_text(json.dumps(blocks_to_json(blocks), indent=2, ensure_ascii=False), encoding='utf-8')
    else:
        out.write_text(build_digest(blocks), encoding='utf-8')
    return out
