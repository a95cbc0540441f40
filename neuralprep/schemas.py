"""
Pydantic models for the question bank.

These models define the structure of MongoDB question documents and the
scope filters used to load a question pool.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


ALL = "all"  # Scope wildcard for subjects/chapters
OPTION_LABELS = ("A", "B", "C", "D")


class Difficulty(str, Enum):
    """Author-assigned difficulty of a question."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuestionOption(BaseModel):
    """One labeled answer choice."""
    label: str = Field(..., description="Option label (A-D)")
    text: str = Field(..., description="Option text")


class Question(BaseModel):
    """
    A multiple-choice question, denormalized with its subject and chapter.

    Read-only to the review engine.
    """
    id: str
    text: str
    options: list[QuestionOption] = Field(default_factory=list, max_length=len(OPTION_LABELS))
    correct_option: str = Field(..., description="Label of the correct option")
    explanation: str = ""
    important: bool = False
    difficulty: Optional[Difficulty] = None

    # Scope tags
    subject_id: str
    chapter_id: str

    # Display-only copies of the owning subject/chapter names
    subject_name: Optional[str] = None
    chapter_name: Optional[str] = None

    def option_labels(self) -> list[str]:
        return [option.label for option in self.options]


class QuestionScope(BaseModel):
    """
    Subject/chapter filter for loading a question pool.

    Either list may be ["all"] (the default) to include everything.
    """
    subject_ids: list[str] = Field(default_factory=lambda: [ALL])
    chapter_ids: list[str] = Field(default_factory=lambda: [ALL])

    def all_subjects(self) -> bool:
        return not self.subject_ids or self.subject_ids[0] == ALL

    def all_chapters(self) -> bool:
        return not self.chapter_ids or self.chapter_ids[0] == ALL
