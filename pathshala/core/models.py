"""
Core domain models.

Shared by the practice generators, the record store and the analytics engine.

Design:
- Enums for the closed vocabularies (operation, difficulty, language, icon kind)
- PracticeProblem / VisualGroup: frozen dataclasses, created per round, never stored
- *Record models: pydantic models persisted as JSON by the record store
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


def local_now() -> datetime:
    """Current time in the local timezone, offset-aware."""
    return datetime.now().astimezone()


class Operation(str, Enum):
    """Arithmetic operation of a practice problem."""

    ADDITION = "addition"
    SUBTRACTION = "subtraction"
    MULTIPLICATION = "multiplication"
    DIVISION = "division"

    @property
    def symbol(self) -> str:
        """Symbol used in the question text."""
        return {
            Operation.ADDITION: "+",
            Operation.SUBTRACTION: "-",
            Operation.MULTIPLICATION: "×",
            Operation.DIVISION: "÷",
        }[self]

    @property
    def id_prefix(self) -> str:
        """Short prefix for problem ids ("add", "sub", "mul", "div")."""
        return self.value[:3]


class Difficulty(str, Enum):
    """Difficulty level; scales the operand ranges."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Language(str, Enum):
    BANGLA = "bangla"
    ENGLISH = "english"


class IconKind(str, Enum):
    """Icon used to draw a countable visual group."""

    APPLE = "apple"
    BALLOON = "balloon"
    STAR = "star"
    HEART = "heart"
    ANIMAL = "animal"


# =============================================================================
# Practice problems (not persisted)
# =============================================================================


@dataclass(frozen=True)
class VisualGroup:
    """A cluster of identical icons representing one operand or partial product."""

    icon_kind: IconKind
    count: int
    color: str


@dataclass(frozen=True)
class PracticeProblem:
    """A generated arithmetic problem with its pictorial representation."""

    id: str
    operation: Operation
    question_text: str
    operands: tuple[int, int]
    answer: int
    difficulty: Difficulty
    visual_groups: tuple[VisualGroup, ...]

    @property
    def total_icons(self) -> int:
        """Number of icons across all visual groups."""
        return sum(group.count for group in self.visual_groups)

    def check(self, answer: int) -> bool:
        """True if ``answer`` is the correct answer."""
        return answer == self.answer


# =============================================================================
# Persisted records
# =============================================================================


class StoredRecord(BaseModel):
    """Base for persisted records: immutable, tolerant of unknown fields."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class PracticeResultRecord(StoredRecord):
    """One completed math practice session."""

    operation: Operation
    difficulty: Difficulty
    correct_count: int = Field(default=0, ge=0)
    total_attempted: int = Field(default=0, ge=0)
    timestamp: datetime = Field(default_factory=local_now)

    @model_validator(mode="after")
    def _correct_within_attempted(self) -> PracticeResultRecord:
        if self.correct_count > self.total_attempted:
            raise ValueError(
                f"correct_count ({self.correct_count}) exceeds "
                f"total_attempted ({self.total_attempted})"
            )
        return self

    @property
    def accuracy_percent(self) -> float:
        """Session accuracy 0-100 (0 for an empty session)."""
        if self.total_attempted == 0:
            return 0.0
        return self.correct_count / self.total_attempted * 100


class LetterProgressRecord(StoredRecord):
    """Progress on a single alphabet letter."""

    letter_id: str
    language: Language = Language.ENGLISH
    completed: bool = False
    score: int | None = None
    timestamp: datetime = Field(default_factory=local_now)


class FavoriteStoryRecord(StoredRecord):
    """A story the child saved to favourites."""

    title: str
    content: str = ""
    words: list[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=local_now)


class UserProfile(StoredRecord):
    name: str
    age: int = Field(ge=0)
    created_at: datetime = Field(default_factory=local_now)


class AppSettings(StoredRecord):
    """User-facing app settings (language, sound, theme)."""

    language: Language = Language.ENGLISH
    volume: float = Field(default=0.8, ge=0.0, le=1.0)
    sound_effects: bool = True
    haptic_feedback: bool = True
    theme: Literal["light", "dark"] = "light"
