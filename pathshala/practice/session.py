"""
Practice session tracking.

A session is one sitting at a single operation/difficulty: problems are
served one at a time, answers are scored, and a single PracticeResultRecord
is stored when the session finishes.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger

from pathshala.core.models import Difficulty, Operation, PracticeProblem, PracticeResultRecord
from pathshala.practice.distractors import DEFAULT_MAX_ATTEMPTS, multiple_choice_options
from pathshala.practice.problem_generator import ProblemGenerator
from pathshala.storage.record_store import Collection, RecordStore


@dataclass
class PracticeSession:
    """Running score for one practice sitting."""

    operation: Operation
    difficulty: Difficulty = Difficulty.EASY
    generator: ProblemGenerator = field(default_factory=ProblemGenerator)
    correct: int = 0
    attempted: int = 0
    current: PracticeProblem | None = None

    def __post_init__(self) -> None:
        self.operation = Operation(self.operation)
        self.difficulty = Difficulty(self.difficulty)

    def next_problem(self) -> PracticeProblem:
        """Generate and remember the next problem."""
        self.current = self.generator.generate(self.operation, self.difficulty)
        return self.current

    def options(self, count: int = 4, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> list[int]:
        """Multiple-choice options for the current problem."""
        if self.current is None:
            raise RuntimeError("No current problem; call next_problem() first")
        return multiple_choice_options(
            self.current, count=count, rng=self.generator.rng, max_attempts=max_attempts
        )

    def submit(self, answer: int) -> bool:
        """Score an answer to the current problem; the problem is then consumed."""
        if self.current is None:
            raise RuntimeError("No current problem; call next_problem() first")
        is_correct = self.current.check(answer)
        self.attempted += 1
        if is_correct:
            self.correct += 1
        self.current = None
        return is_correct

    def to_record(self) -> PracticeResultRecord:
        return PracticeResultRecord(
            operation=self.operation,
            difficulty=self.difficulty,
            correct_count=self.correct,
            total_attempted=self.attempted,
        )

    async def finish(self, store: RecordStore) -> PracticeResultRecord | None:
        """
        Store the session result.

        Returns:
            The stored record, or None if nothing was attempted
        """
        if self.attempted == 0:
            logger.debug("Practice session ended with no attempts; nothing stored")
            return None
        record = self.to_record()
        await store.append(Collection.MATH_SCORES, record)
        logger.info(
            f"Practice session complete: {self.operation.value}/{self.difficulty.value} "
            f"{self.correct}/{self.attempted}"
        )
        return record
