from __future__ import annotations

import uuid
from typing import List, Literal

from pydantic import BaseModel, Field


def new_record_id() -> str:
    return str(uuid.uuid4())


class Record(BaseModel):
    """One saved prompt. Every field is text, ``date`` included."""

    id: str = Field(default_factory=new_record_id)
    title: str = ""
    content: str = ""
    notes: str = ""
    author: str = ""
    link: str = ""
    category: str = ""
    date: str = Field(default="", examples=["2024-05-01"])


class RecordDraft(BaseModel):
    """Form input for creating or editing a record.

    A non-blank ``new_category`` takes precedence over ``category``.
    """

    title: str = ""
    content: str = ""
    notes: str = ""
    author: str = ""
    link: str = ""
    category: str = ""
    new_category: str = ""
    date: str = ""


class ImportResponse(BaseModel):
    imported: int = 0
    new_categories: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    records: List[Record] = Field(default_factory=list)


class CategoriesResponse(BaseModel):
    categories: List[str] = Field(default_factory=list)


SortOrder = Literal["newest", "oldest"]


class HealthResponse(BaseModel):
    ok: bool = True
