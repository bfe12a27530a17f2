"""
Progress Module - accuracy, badges and streaks from stored records.
"""

from pathshala.progress.analytics import (
    BADGE_RULES,
    Achievements,
    BadgeRule,
    OverallProgress,
    ProgressAnalytics,
    RecentActivity,
    rounded_percent,
)

__all__ = [
    "BADGE_RULES",
    "Achievements",
    "BadgeRule",
    "OverallProgress",
    "ProgressAnalytics",
    "RecentActivity",
    "rounded_percent",
]
