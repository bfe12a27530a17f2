"""
Typed convenience API over a RecordStore.

Screens talk to this instead of naming collection keys themselves.
"""

from __future__ import annotations

from loguru import logger

from pathshala.core.models import (
    AppSettings,
    Difficulty,
    FavoriteStoryRecord,
    Language,
    LetterProgressRecord,
    Operation,
    PracticeResultRecord,
    UserProfile,
)
from pathshala.storage.record_store import Collection, RecordStore, SingletonKey


def default_settings() -> AppSettings:
    """Settings used until the user saves their own."""
    return AppSettings()


class RecordRepository:
    """Read and write learner records through an injected store."""

    def __init__(self, store: RecordStore):
        self.store = store

    # ----- onboarding ---------------------------------------------------------

    async def set_onboarding_completed(self, completed: bool = True) -> None:
        await self.store.set(SingletonKey.ONBOARDING_COMPLETED, completed)

    async def is_onboarding_completed(self) -> bool:
        return bool(await self.store.get(SingletonKey.ONBOARDING_COMPLETED))

    # ----- profile & settings -------------------------------------------------

    async def save_user_profile(self, profile: UserProfile) -> None:
        await self.store.set(SingletonKey.USER_PROFILE, profile)

    async def get_user_profile(self) -> UserProfile | None:
        return await self.store.get(SingletonKey.USER_PROFILE)

    async def save_settings(self, settings: AppSettings) -> None:
        await self.store.set(SingletonKey.SETTINGS, settings)

    async def get_settings(self) -> AppSettings:
        """Stored settings, or the defaults if none were saved."""
        settings = await self.store.get(SingletonKey.SETTINGS)
        return settings if settings is not None else default_settings()

    # ----- letters --------------------------------------------------------------

    async def save_learning_progress(self, progress: LetterProgressRecord) -> None:
        await self.store.append(Collection.LEARNING_PROGRESS, progress)

    async def get_learning_progress(self) -> list[LetterProgressRecord]:
        return await self.store.read_all(Collection.LEARNING_PROGRESS)

    async def get_letter_progress(
        self, letter_id: str, language: Language | str
    ) -> LetterProgressRecord | None:
        """First stored record for a letter in a language, if any."""
        language = Language(language)
        for record in await self.get_learning_progress():
            if record.letter_id == letter_id and record.language is language:
                return record
        return None

    # ----- math ---------------------------------------------------------------------

    async def save_math_score(self, score: PracticeResultRecord) -> None:
        await self.store.append(Collection.MATH_SCORES, score)
        logger.info(
            f"Saved {score.operation.value}/{score.difficulty.value} session: "
            f"{score.correct_count}/{score.total_attempted}"
        )

    async def get_math_scores(self) -> list[PracticeResultRecord]:
        return await self.store.read_all(Collection.MATH_SCORES)

    async def best_math_score(
        self, operation: Operation | str, difficulty: Difficulty | str
    ) -> float:
        """
        Best session accuracy (0-100) for an operation and difficulty.

        Sessions with no attempts are ignored; returns 0 when none match.
        """
        operation = Operation(operation)
        difficulty = Difficulty(difficulty)
        accuracies = [
            score.accuracy_percent
            for score in await self.get_math_scores()
            if score.operation is operation
            and score.difficulty is difficulty
            and score.total_attempted > 0
        ]
        return max(accuracies, default=0.0)

    # ----- stories ------------------------------------------------------------------

    async def save_favorite_story(
        self, title: str, content: str, words: list[str]
    ) -> FavoriteStoryRecord:
        story = FavoriteStoryRecord(title=title, content=content, words=list(words))
        await self.store.append(Collection.FAVORITE_STORIES, story)
        return story

    async def get_favorite_stories(self) -> list[FavoriteStoryRecord]:
        return await self.store.read_all(Collection.FAVORITE_STORIES)

    async def delete_favorite_story(self, index: int) -> FavoriteStoryRecord:
        return await self.store.delete_at(Collection.FAVORITE_STORIES, index)

    # ----- reset ----------------------------------------------------------------------

    async def clear_all(self) -> None:
        await self.store.clear()
