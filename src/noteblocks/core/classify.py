"""Stateless line predicates and priority-ordered line classification"""

import re
from enum import Enum


HEADER_RE = re.compile(r'^#+\s')
MENTION_RE = re.compile(r'\[\[[^\[\]|]+(\|[^\[\]]*)?\]\]')
CODE_FENCE = '```'
HORIZONTAL_RULE = '---'
TODO_MARKER = '- [ ]'
DONE_MARKER = '- [x]'


class LineKind(str, Enum):
    header = "header"
    callout = "callout"
    code_fence = "code_fence"
    mention = "mention"
    todo = "todo"
    done = "done"
    blank = "blank"
    rule = "rule"
    text = "text"


def strip_quote(line: str) -> str:
    """Drop one leading '>' from the trimmed line and trim again; other lines are returned trimmed."""
    stripped = line.strip()
    if stripped.startswith('>'):
        return stripped[1:].strip()
    return stripped


def _has_marker(line: str, marker: str) -> bool:
    stripped = line.strip()
    if stripped.startswith(marker):
        return True
    return stripped.startswith('>') and strip_quote(stripped).startswith(marker)


def is_header(line: str) -> bool:
    return bool(HEADER_RE.match(line))


def header_level(line: str) -> int:
    """Number of leading '#' characters (e.g. '## Title' -> 2)."""
    return len(line) - len(line.lstrip('#'))


def is_todo_line(line: str) -> bool:
    return _has_marker(line, TODO_MARKER)


def is_done_line(line: str) -> bool:
    return _has_marker(line, DONE_MARKER)


def is_callout(line: str) -> bool:
    """A quoted line, unless the quote wraps a todo item."""
    stripped = line.strip()
    return stripped.startswith('>') and not is_todo_line(strip_quote(stripped))


def is_code_fence(line: str) -> bool:
    return line.startswith(CODE_FENCE)


def is_mention(line: str) -> bool:
    """True when the line holds a [[Target]] or [[Target|Alias]] link anywhere."""
    return bool(MENTION_RE.search(line))


def is_blank(line: str) -> bool:
    return not line.strip()


def is_horizontal_rule(line: str) -> bool:
    return line.strip() == HORIZONTAL_RULE


# Evaluated in order; the first match wins.
_PRIORITY = (
    (LineKind.header,     is_header),
    (LineKind.callout,    is_callout),
    (LineKind.code_fence, is_code_fence),
    (LineKind.mention,    is_mention),
    (LineKind.todo,       is_todo_line),
    (LineKind.done,       is_done_line),
    (LineKind.blank,      is_blank),
    (LineKind.rule,       is_horizontal_rule),
)


def classify(line: str) -> LineKind:
    """Return the highest-priority kind matching line, or LineKind.text."""
    for kind, matches in _PRIORITY:
        if matches(line):
            return kind
    return LineKind.text
