"""
Unit tests for ProgressAnalytics.

Tests:
- Overall totals and guarded accuracy
- Recent-activity window and per-day buckets
- Badge thresholds and milestone priority
- Learning streak rules

Run: pytest tests/unit/test_analytics.py -v
"""

from datetime import timedelta

import pytest
from loguru import logger

from pathshala.progress.analytics import (
    BADGE_RULES,
    OverallProgress,
    ProgressAnalytics,
    rounded_percent,
)
from pathshala.storage.record_store import Collection, MemoryRecordStore


@pytest.fixture
def analytics(memory_store, fixed_now):
    return ProgressAnalytics(memory_store, clock=lambda: fixed_now)


async def add_scores(store, *records):
    for record in records:
        await store.append(Collection.MATH_SCORES, record)


async def add_letters(store, *records):
    for record in records:
        await store.append(Collection.LEARNING_PROGRESS, record)


class TestOverallProgress:
    @pytest.mark.asyncio
    async def test_empty_store(self, analytics):
        progress = await analytics.overall_progress()
        assert progress == OverallProgress(0, 0, 0, 0)

    @pytest.mark.asyncio
    async def test_accuracy_across_sessions(self, analytics, memory_store, make_score):
        await add_scores(memory_store, make_score(7, 10), make_score(3, 10))

        progress = await analytics.overall_progress()

        assert progress.accuracy_percent == 50
        assert progress.math_problems_completed == 20

    @pytest.mark.asyncio
    async def test_only_empty_sessions(self, analytics, memory_store, make_score):
        await add_scores(memory_store, make_score(0, 0))
        assert (await analytics.overall_progress()).accuracy_percent == 0

    @pytest.mark.asyncio
    async def test_counts_completed_letters_and_stories(
        self, analytics, memory_store, make_letter, make_story
    ):
        await add_letters(memory_store, make_letter("A"), make_letter("B", completed=False),
                          make_letter("C"))
        await memory_store.append(Collection.FAVORITE_STORIES, make_story())

        progress = await analytics.overall_progress()

        assert progress.letters_learned == 2
        assert progress.stories_created == 1

    @pytest.mark.asyncio
    async def test_idempotent_without_writes(self, analytics, memory_store, make_score, make_letter):
        await add_scores(memory_store, make_score(4, 9))
        await add_letters(memory_store, make_letter())
        assert await analytics.overall_progress() == await analytics.overall_progress()

    def test_rounding_is_half_up(self):
        assert rounded_percent(1, 8) == 13  # 12.5
        assert rounded_percent(5, 8) == 63  # 62.5
        assert rounded_percent(2, 3) == 67
        assert rounded_percent(1, 0) == 0


class TestRecentActivity:
    @pytest.mark.asyncio
    async def test_window_filters_old_records(
        self, analytics, memory_store, make_score, make_letter, fixed_now
    ):
        await add_scores(
            memory_store,
            make_score(when=fixed_now - timedelta(days=2)),
            make_score(when=fixed_now - timedelta(days=9)),
        )
        await add_letters(memory_store, make_letter(when=fixed_now - timedelta(hours=1)))

        recent = await analytics.recent_activity(7)

        assert len(recent.recent_math_scores) == 1
        assert len(recent.recent_letter_records) == 1

    @pytest.mark.asyncio
    async def test_buckets_by_calendar_day(
        self, analytics, memory_store, make_score, make_letter, fixed_now
    ):
        today = fixed_now.astimezone().date()
        await add_scores(memory_store, make_score(when=fixed_now),
                         make_score(when=fixed_now - timedelta(minutes=1)))
        await add_letters(memory_store, make_letter(when=fixed_now - timedelta(days=1)))

        counts = (await analytics.recent_activity(7)).daily_activity_counts

        assert counts[today] == 2
        assert counts[today - timedelta(days=1)] == 1
        assert sum(counts.values()) == 3

    @pytest.mark.asyncio
    async def test_negative_window_rejected(self, analytics):
        with pytest.raises(ValueError):
            await analytics.recent_activity(-1)


class TestAchievements:
    @pytest.mark.asyncio
    async def test_new_learner(self, analytics):
        result = await analytics.achievements()
        assert result.badges == []
        assert result.next_milestone_text == "Learn 10 more letters to become a Letter Explorer!"

    @pytest.mark.asyncio
    async def test_badges_accumulate(self, analytics, memory_store, make_score, make_letter):
        await add_letters(memory_store, *[make_letter(str(i)) for i in range(12)])
        await add_scores(memory_store, make_score(54, 60))

        result = await analytics.achievements()

        assert result.badges == [
            "📚 Letter Explorer",
            "🧮 Math Beginner",
            "🔢 Math Pro",
            "🎯 Sharp Shooter",
        ]
        assert result.next_milestone_text == "Create 5 more stories to become a Storyteller!"

    @pytest.mark.asyncio
    async def test_math_milestone_after_letters(self, analytics, memory_store, make_score, make_letter):
        await add_letters(memory_store, *[make_letter(str(i)) for i in range(10)])
        await add_scores(memory_store, make_score(2, 4))

        result = await analytics.achievements()

        assert result.next_milestone_text == "Solve 6 more problems to become a Math Beginner!"

    @pytest.mark.asyncio
    async def test_all_badges_and_fallback(
        self, analytics, memory_store, make_score, make_letter, make_story
    ):
        await add_letters(memory_store, *[make_letter(str(i)) for i in range(26)])
        await add_scores(memory_store, make_score(100, 100))
        for i in range(20):
            await memory_store.append(Collection.FAVORITE_STORIES, make_story(title=str(i)))

        result = await analytics.achievements()

        assert result.badges == [rule.label for rule in BADGE_RULES]
        assert result.next_milestone_text == "Keep learning!"


class TestLearningStreak:
    @pytest.fixture
    def store_with_days(self, fixed_now, make_score):
        async def _build(*days_ago):
            store = MemoryRecordStore()
            for days in days_ago:
                await store.append(
                    Collection.MATH_SCORES, make_score(when=fixed_now - timedelta(days=days))
                )
            return ProgressAnalytics(store, clock=lambda: fixed_now)

        return _build

    @pytest.mark.asyncio
    async def test_no_activity(self, analytics):
        assert await analytics.learning_streak() == 0

    @pytest.mark.asyncio
    async def test_three_consecutive_days(self, store_with_days):
        analytics = await store_with_days(0, 1, 2)
        assert await analytics.learning_streak() == 3

    @pytest.mark.asyncio
    async def test_gap_stops_streak(self, store_with_days):
        analytics = await store_with_days(0, 3)
        assert await analytics.learning_streak() == 1

    @pytest.mark.asyncio
    async def test_streak_ending_yesterday(self, store_with_days):
        analytics = await store_with_days(1, 2, 5)
        assert await analytics.learning_streak() == 2

    @pytest.mark.asyncio
    async def test_broken_streak(self, store_with_days):
        analytics = await store_with_days(2, 3, 4)
        assert await analytics.learning_streak() == 0

    @pytest.mark.asyncio
    async def test_multiple_records_same_day(self, store_with_days):
        analytics = await store_with_days(0, 0, 0, 1)
        assert await analytics.learning_streak() == 2

    @pytest.mark.asyncio
    async def test_letters_count_toward_streak(self, memory_store, fixed_now, make_letter, make_score):
        await add_scores(memory_store, make_score(when=fixed_now))
        await add_letters(memory_store, make_letter(when=fixed_now - timedelta(days=1)))
        analytics = ProgressAnalytics(memory_store, clock=lambda: fixed_now)
        assert await analytics.learning_streak() == 2


class TestLogSession:
    def test_logs_duration_in_minutes(self, analytics):
        messages = []
        sink_id = logger.add(messages.append, format="{message}", level="INFO")
        try:
            analytics.log_session(12.5)
        finally:
            logger.remove(sink_id)

        assert any("Session logged: 12.5 minutes" in str(m) for m in messages)
