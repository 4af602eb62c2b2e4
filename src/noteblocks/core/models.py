"""Block records and the internal segmentation state"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BlockType(str, Enum):
    """Kinds of note content the segmenter recognizes"""
    callout = "callout"
    code = "code"
    header = "header"
    mention = "mention"
    todo = "todo"
    done = "done"


class Block(BaseModel):
    """A finalized, typed span of note content."""
    model_config = ConfigDict(frozen=True)

    page: str = ""                      # note identifier, stamped by the pipeline
    block_type: BlockType
    data: str
    mtime: Optional[datetime] = None    # note modification time, stamped by the pipeline
    header_level: int = Field(default=0, ge=0)


@dataclass(frozen=True)
class OpenBlock:
    """A block still being accumulated."""
    block_type: BlockType
    lines: tuple[str, ...]
    header_level: int = 0

    def extend(self, line: str) -> "OpenBlock":
        return OpenBlock(self.block_type, self.lines + (line,), self.header_level)


@dataclass(frozen=True)
class SegmenterState:
    current: Optional[OpenBlock] = None
    blank_lines: int = 0

    @property
    def header_level(self) -> int:
        """Level of the open header block, 0 when no header is open."""
        if self.current and self.current.block_type == BlockType.header:
            return self.current.header_level
        return 0


@dataclass(frozen=True)
class Note:
    """A note to segment: vault-relative identifier and modification time."""
    path: str
    mtime: datetime
