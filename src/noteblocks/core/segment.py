"""Line-by-line segmentation of note text into typed blocks.

The accumulator is a single pure transition function, ``step(state, line)``,
returning the next state and any blocks closed by that line. ``segment`` folds
it over the lines of a note and flushes whatever block is still open at the end.

Rules, in the order they are checked:

- An open code block whose closing fence has not been seen takes every line
  verbatim; the closing fence line ends and emits it.
- A header line opens a header block. An open header absorbs headers of the
  same or a deeper level; a strictly higher-level header (fewer '#') closes it.
- While a header is open, callout, fence, mention, todo and done lines are
  swallowed.
- Mention, todo and done blocks are single-line and emitted immediately.
- Two consecutive blank lines or a '---' rule close an open header.
- Any other text extends the open block, or is dropped when none is open.
"""

from noteblocks.core.classify import LineKind, classify, header_level, is_code_fence, strip_quote
from noteblocks.core.models import Block, BlockType, OpenBlock, SegmenterState


_SUPPRESSED_BY_HEADER = {
    LineKind.callout, LineKind.code_fence, LineKind.mention, LineKind.todo, LineKind.done,
}
_SINGLE_LINE = {
    LineKind.mention: BlockType.mention,
    LineKind.todo:    BlockType.todo,
    LineKind.done:    BlockType.done,
}


def emit(block: OpenBlock) -> Block:
    """Finalize an open block; page and mtime are left for the caller."""
    return Block(
        block_type=block.block_type,
        data='\n'.join(block.lines),
        header_level=block.header_level if block.block_type == BlockType.header else 0,
    )


def _close(block: OpenBlock | None) -> list[Block]:
    return [emit(block)] if block else []


def _is_open(block: OpenBlock | None, block_type: BlockType) -> bool:
    return block is not None and block.block_type == block_type


def _header_line(state: SegmenterState, line: str) -> tuple[SegmenterState, list[Block]]:
    level = header_level(line)
    current = state.current
    if _is_open(current, BlockType.header) and level >= state.header_level:
        return SegmenterState(current.extend(line)), []
    return SegmenterState(OpenBlock(BlockType.header, (line,), level)), _close(current)


def _single_line(kind: LineKind, line: str) -> str:
    """Mention lines are kept as-is; todo/done lines lose a wrapping '>' quote."""
    if kind != LineKind.mention and line.strip().startswith('>'):
        return strip_quote(line)
    return line


def step(state: SegmenterState, line: str) -> tuple[SegmenterState, list[Block]]:
    """Advance the segmenter by one line. Returns (next_state, emitted_blocks)."""
    current = state.current

    # An open code block is always unterminated; its interior is not classified.
    if _is_open(current, BlockType.code):
        block = current.extend(line)
        if is_code_fence(line):
            return SegmenterState(), [emit(block)]
        return SegmenterState(block), []

    kind = classify(line)

    if kind == LineKind.header:
        return _header_line(state, line)

    if kind in _SUPPRESSED_BY_HEADER and _is_open(current, BlockType.header):
        return SegmenterState(current), []

    if kind == LineKind.callout:
        if _is_open(current, BlockType.callout):
            return SegmenterState(current.extend(line)), []
        return SegmenterState(OpenBlock(BlockType.callout, (line,))), _close(current)

    if kind == LineKind.code_fence:
        return SegmenterState(OpenBlock(BlockType.code, (line,))), _close(current)

    if kind in _SINGLE_LINE:
        block = OpenBlock(_SINGLE_LINE[kind], (_single_line(kind, line),))
        return SegmenterState(), _close(current) + [emit(block)]

    if kind == LineKind.blank:
        blank_lines = state.blank_lines + 1
        if blank_lines < 2:
            return SegmenterState(current, blank_lines), []
        if _is_open(current, BlockType.header):
            return SegmenterState(), [emit(current)]
        return SegmenterState(current), []

    if kind == LineKind.rule:
        if _is_open(current, BlockType.header):
            return SegmenterState(), [emit(current)]
        return SegmenterState(current), []

    if current:
        return SegmenterState(current.extend(line)), []
    return SegmenterState(), []


def flush(state: SegmenterState) -> list[Block]:
    """Emit the block still open at end of input, if any."""
    return _close(state.current)


def split_lines(text: str) -> list[str]:
    return text.replace('\r\n', '\n').split('\n')


def segment(text: str) -> list[Block]:
    """Split note text into an ordered list of typed blocks.

    Total over any input: empty text, or text without any recognizable block,
    returns an empty list.
    """
    state = SegmenterState()
    blocks: list[Block] = []
    for line in split_lines(text):
        state, emitted = step(state, line)
        blocks.extend(emitted)
    blocks.extend(flush(state))
    return blocks
