"""
Practice Module - problem generation, distractors and session scoring.
"""

from pathshala.practice.distractors import multiple_choice_options
from pathshala.practice.problem_generator import (
    COLOR_PALETTE,
    ICON_KINDS,
    NUMBER_RANGES,
    PRODUCT_CAPS,
    ProblemGenerator,
    check_answer,
    generate_problem,
)
from pathshala.practice.session import PracticeSession

__all__ = [
    "COLOR_PALETTE",
    "ICON_KINDS",
    "NUMBER_RANGES",
    "PRODUCT_CAPS",
    "PracticeSession",
    "ProblemGenerator",
    "check_answer",
    "generate_problem",
    "multiple_choice_options",
]
