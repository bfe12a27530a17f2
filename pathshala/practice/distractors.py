"""
Distractor generation for multiple-choice math questions.

Wrong answers are the correct answer nudged by a random offset of 1-10 in
either direction, kept only when positive and not already offered.
"""
from __future__ import annotations

import random

from loguru import logger

from pathshala.core.models import PracticeProblem

MAX_OFFSET = 10
DEFAULT_MAX_ATTEMPTS = 1000


def multiple_choice_options(
    problem: PracticeProblem | int,
    count: int = 4,
    rng: random.Random | None = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> list[int]:
    """
    Build ``count`` distinct options containing the correct answer once.

    Args:
        problem: The problem, or its correct answer
        count: Number of options including the answer
        rng: Random source (module random if None)
        max_attempts: Random draws before falling back to answer+1, answer+2, ...

    Returns:
        Options in random order; every distractor is a positive integer
    """
    if count < 1:
        raise ValueError(f"count must be at least 1, got {count}")

    rng = rng or random.Random()
    answer = problem.answer if isinstance(problem, PracticeProblem) else int(problem)

    options = {answer}
    attempts = 0
    while len(options) < count and attempts < max_attempts:
        attempts += 1
        offset = rng.randint(1, MAX_OFFSET)
        candidate = answer + offset if rng.randint(0, 1) == 0 else answer - offset
        if candidate > 0:
            options.add(candidate)

    if len(options) < count:
        logger.debug(f"Padding options for answer {answer} after {attempts} draws")
        step = 1
        while len(options) < count:
            if answer + step > 0:
                options.add(answer + step)
            step += 1

    shuffled = list(options)
    rng.shuffle(shuffled)
    return shuffled
