"""
Core Module - Shared domain models.

All other modules (practice/, storage/, progress/) import the canonical
enums and record types from here rather than redefining them.
"""

from pathshala.core.models import (
    AppSettings,
    Difficulty,
    FavoriteStoryRecord,
    IconKind,
    Language,
    LetterProgressRecord,
    Operation,
    PracticeProblem,
    PracticeResultRecord,
    StoredRecord,
    UserProfile,
    VisualGroup,
    local_now,
)

__all__ = [
    "AppSettings",
    "Difficulty",
    "FavoriteStoryRecord",
    "IconKind",
    "Language",
    "LetterProgressRecord",
    "Operation",
    "PracticeProblem",
    "PracticeResultRecord",
    "StoredRecord",
    "UserProfile",
    "VisualGroup",
    "local_now",
]
