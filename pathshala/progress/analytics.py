"""
Progress Analytics for the learning app.

Aggregates stored practice and letter records into:
- Overall progress (letters learned, problems solved, stories, accuracy)
- Recent activity bucketed by local calendar day
- Badges with the next milestone to aim for
- Learning streak (consecutive active days ending today or yesterday)

Badge thresholds:
    letters  10 Letter Explorer, 26 Alphabet Master
    math     10 Math Beginner, 50 Math Pro, 100 Math Champion
    accuracy 80 Sharp Shooter, 95 Perfectionist
    stories   5 Storyteller, 20 Author
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from loguru import logger

from pathshala.core.models import (
    LetterProgressRecord,
    PracticeResultRecord,
    local_now,
)
from pathshala.storage.record_store import Collection, RecordStore

DEFAULT_ACTIVITY_DAYS = 7
DEFAULT_STREAK_DAYS = 30


@dataclass(frozen=True)
class OverallProgress:
    """Lifetime totals across every stored record."""

    letters_learned: int
    math_problems_completed: int
    stories_created: int
    accuracy_percent: int


@dataclass
class RecentActivity:
    """Records inside a look-back window plus per-day activity counts."""

    recent_math_scores: list[PracticeResultRecord] = field(default_factory=list)
    recent_letter_records: list[LetterProgressRecord] = field(default_factory=list)
    daily_activity_counts: dict[date, int] = field(default_factory=dict)


@dataclass
class Achievements:
    badges: list[str]
    next_milestone_text: str


@dataclass(frozen=True)
class BadgeRule:
    """A badge earned once ``metric`` reaches ``threshold``."""

    metric: str  # attribute of OverallProgress
    threshold: int
    label: str

    def is_met(self, progress: OverallProgress) -> bool:
        return getattr(progress, self.metric) >= self.threshold


BADGE_RULES: tuple[BadgeRule, ...] = (
    BadgeRule("letters_learned", 10, "📚 Letter Explorer"),
    BadgeRule("letters_learned", 26, "🎓 Alphabet Master"),
    BadgeRule("math_problems_completed", 10, "🧮 Math Beginner"),
    BadgeRule("math_problems_completed", 50, "🔢 Math Pro"),
    BadgeRule("math_problems_completed", 100, "🏆 Math Champion"),
    BadgeRule("accuracy_percent", 80, "🎯 Sharp Shooter"),
    BadgeRule("accuracy_percent", 95, "⭐ Perfectionist"),
    BadgeRule("stories_created", 5, "📖 Storyteller"),
    BadgeRule("stories_created", 20, "✍️ Author"),
)

# Checked in order; the first unmet one is reported
MILESTONES: tuple[tuple[str, int, str], ...] = (
    ("letters_learned", 10, "Learn {remaining} more letters to become a Letter Explorer!"),
    ("math_problems_completed", 10, "Solve {remaining} more problems to become a Math Beginner!"),
    ("stories_created", 5, "Create {remaining} more stories to become a Storyteller!"),
)

FALLBACK_MILESTONE = "Keep learning!"


def rounded_percent(part: int, whole: int) -> int:
    """``100 * part / whole`` rounded half up; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def local_date(timestamp: datetime) -> date:
    """Calendar date of a timestamp in local time (naive values are taken as local)."""
    return timestamp.astimezone().date()


class ProgressAnalytics:
    """
    Computes progress statistics from an injected record store.

    All reads go through the store, so results reflect the records present
    at call time; nothing is cached between calls.
    """

    def __init__(
        self,
        store: RecordStore,
        clock: Callable[[], datetime] = local_now,
        streak_window_days: int = DEFAULT_STREAK_DAYS,
    ):
        """
        Args:
            store: Record store to read from
            clock: Returns "now"; inject a fixed clock in tests
            streak_window_days: Look-back window for learning_streak()
        """
        self.store = store
        self.clock = clock
        self.streak_window_days = streak_window_days

    async def overall_progress(self) -> OverallProgress:
        """Lifetime totals; accuracy is 0 when nothing was attempted."""
        letters: list[LetterProgressRecord] = await self.store.read_all(Collection.LEARNING_PROGRESS)
        scores: list[PracticeResultRecord] = await self.store.read_all(Collection.MATH_SCORES)
        stories = await self.store.read_all(Collection.FAVORITE_STORIES)

        total_correct = sum(score.correct_count for score in scores)
        total_attempted = sum(score.total_attempted for score in scores)

        return OverallProgress(
            letters_learned=sum(1 for record in letters if record.completed),
            math_problems_completed=total_attempted,
            stories_created=len(stories),
            accuracy_percent=rounded_percent(total_correct, total_attempted),
        )

    async def recent_activity(self, days: int = DEFAULT_ACTIVITY_DAYS) -> RecentActivity:
        """
        Records from the last ``days`` days and a per-day activity count.

        Args:
            days: Look-back window; records with timestamp >= now - days are kept
        """
        if days < 0:
            raise ValueError(f"days must be non-negative, got {days}")

        cutoff = self.clock().astimezone() - timedelta(days=days)
        scores: list[PracticeResultRecord] = await self.store.read_all(Collection.MATH_SCORES)
        letters: list[LetterProgressRecord] = await self.store.read_all(Collection.LEARNING_PROGRESS)

        recent_scores = [score for score in scores if score.timestamp.astimezone() >= cutoff]
        recent_letters = [record for record in letters if record.timestamp.astimezone() >= cutoff]

        daily = Counter(local_date(item.timestamp) for item in [*recent_scores, *recent_letters])

        return RecentActivity(
            recent_math_scores=recent_scores,
            recent_letter_records=recent_letters,
            daily_activity_counts=dict(daily),
        )

    async def achievements(self) -> Achievements:
        """Earned badges (rule order) and the nearest unmet milestone."""
        progress = await self.overall_progress()
        badges = [rule.label for rule in BADGE_RULES if rule.is_met(progress)]

        next_milestone = FALLBACK_MILESTONE
        for metric, threshold, template in MILESTONES:
            value = getattr(progress, metric)
            if value < threshold:
                next_milestone = template.format(remaining=threshold - value)
                break

        return Achievements(badges=badges, next_milestone_text=next_milestone)

    async def learning_streak(self) -> int:
        """
        Consecutive active days ending today or yesterday.

        Returns 0 when there is no activity or the latest active day is older
        than yesterday.
        """
        activity = await self.recent_activity(self.streak_window_days)
        dates = sorted(activity.daily_activity_counts)
        if not dates:
            return 0

        today = self.clock().astimezone().date()
        if dates[-1] not in (today, today - timedelta(days=1)):
            return 0

        streak = 1
        for i in range(len(dates) - 2, -1, -1):
            if (dates[i + 1] - dates[i]).days == 1:
                streak += 1
            else:
                break
        return streak

    def log_session(self, duration_minutes: float) -> None:
        """Record how long the app was used in one sitting."""
        logger.info(f"Session logged: {duration_minutes:.1f} minutes")
