"""Database table definitions for indexed notes and their blocks"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime, String, Text
from sqlmodel import Field, SQLModel

from noteblocks.core.models import BlockType


class NoteRecord(SQLModel, table=True):
    """A note whose blocks are held in the index"""
    __tablename__ = "notes"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    path: str = Field(..., sa_column=Column(Text, nullable=False, unique=True))
    mtime: datetime = Field(..., sa_column=Column(DateTime(timezone=False), nullable=False))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    indexed_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class NoteBlockRow(SQLModel, table=True):
    """One segmented block, stored in note order"""
    __tablename__ = "note_blocks"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    note_id: UUID = Field(..., foreign_key="notes.id", index=True, nullable=False)
    page: str = Field(..., index=True, nullable=False)
    block_type: BlockType = Field(..., index=True, nullable=False)
    data: str = Field(..., sa_column=Column(Text, nullable=False))
    header_level: int = Field(default=0, nullable=False)
    position: int = Field(..., nullable=False, description="Position of the block within its note")
    mtime: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False), nullable=True))
