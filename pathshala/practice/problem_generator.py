"""
Problem Generator for math practice.

Produces arithmetic problems whose operand ranges scale with difficulty and
whose visual groups let a child count the answer:

- addition/subtraction: one group per operand
- multiplication: operand1 groups of operand2 icons
- division: a single group of dividend icons

Constraints hold by construction: subtraction never goes negative and
division always has an integer quotient.
"""
from __future__ import annotations

import random
import time
from collections.abc import Sequence

from pathshala.core.models import (
    Difficulty,
    IconKind,
    Operation,
    PracticeProblem,
    VisualGroup,
)

# Operand range for addition and subtraction
NUMBER_RANGES: dict[Difficulty, tuple[int, int]] = {
    Difficulty.EASY: (1, 10),
    Difficulty.MEDIUM: (1, 20),
    Difficulty.HARD: (1, 50),
}

# Per-operand cap for multiplication and division (keeps groups drawable)
PRODUCT_CAPS: dict[Difficulty, int] = {
    Difficulty.EASY: 5,
    Difficulty.MEDIUM: 10,
    Difficulty.HARD: 12,
}

ICON_KINDS: tuple[IconKind, ...] = tuple(IconKind)

COLOR_PALETTE: tuple[str, ...] = (
    "#FF6B6B",
    "#4ECDC4",
    "#45B7D1",
    "#FFA07A",
    "#98D8C8",
    "#F7DC6F",
    "#BB8FCE",
)


class ProblemGenerator:
    """
    Generates practice problems from an injectable random source.

    Pass a seeded ``random.Random`` to get reproducible problems.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def generate(
        self,
        operation: Operation | str,
        difficulty: Difficulty | str = Difficulty.EASY,
    ) -> PracticeProblem:
        """
        Generate one problem.

        Args:
            operation: Operation enum or its value ("addition", ...)
            difficulty: Difficulty enum or its value ("easy", ...)

        Raises:
            ValueError: If operation or difficulty is not a known value
        """
        operation = Operation(operation)
        difficulty = Difficulty(difficulty)

        if operation is Operation.ADDITION:
            return self._addition(difficulty)
        if operation is Operation.SUBTRACTION:
            return self._subtraction(difficulty)
        if operation is Operation.MULTIPLICATION:
            return self._multiplication(difficulty)
        return self._division(difficulty)

    def generate_batch(
        self,
        count: int,
        operations: Sequence[Operation | str],
        difficulty: Difficulty | str = Difficulty.EASY,
    ) -> list[PracticeProblem]:
        """Generate ``count`` problems, picking each operation at random from ``operations``."""
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        if not operations:
            raise ValueError("operations must not be empty")
        return [self.generate(self.rng.choice(operations), difficulty) for _ in range(count)]

    # ----- per-operation builders ----------------------------------------------

    def _addition(self, difficulty: Difficulty) -> PracticeProblem:
        low, high = NUMBER_RANGES[difficulty]
        num1 = self.rng.randint(low, high)
        num2 = self.rng.randint(low, high)
        return self._build(
            Operation.ADDITION, difficulty, num1, num2, num1 + num2, self._operand_groups(num1, num2)
        )

    def _subtraction(self, difficulty: Difficulty) -> PracticeProblem:
        low, high = NUMBER_RANGES[difficulty]
        num1 = self.rng.randint(low, high)
        num2 = self.rng.randint(low, num1)
        return self._build(
            Operation.SUBTRACTION, difficulty, num1, num2, num1 - num2, self._operand_groups(num1, num2)
        )

    def _multiplication(self, difficulty: Difficulty) -> PracticeProblem:
        cap = PRODUCT_CAPS[difficulty]
        num1 = self.rng.randint(1, cap)
        num2 = self.rng.randint(1, cap)

        icon = self.rng.choice(ICON_KINDS)
        offset = self.rng.randrange(len(COLOR_PALETTE))
        groups = tuple(
            VisualGroup(icon, num2, COLOR_PALETTE[(offset + i) % len(COLOR_PALETTE)])
            for i in range(num1)
        )
        return self._build(Operation.MULTIPLICATION, difficulty, num1, num2, num1 * num2, groups)

    def _division(self, difficulty: Difficulty) -> PracticeProblem:
        cap = PRODUCT_CAPS[difficulty]
        divisor = self.rng.randint(1, cap)
        quotient = self.rng.randint(1, cap)
        dividend = divisor * quotient

        groups = (VisualGroup(self.rng.choice(ICON_KINDS), dividend, self.rng.choice(COLOR_PALETTE)),)
        return self._build(Operation.DIVISION, difficulty, dividend, divisor, quotient, groups)

    # ----- helpers ------------------------------------------------------------------

    def _operand_groups(self, num1: int, num2: int) -> tuple[VisualGroup, VisualGroup]:
        """One group per operand: same icon, two distinct colours."""
        icon = self.rng.choice(ICON_KINDS)
        first, second = self.rng.sample(COLOR_PALETTE, 2)
        return VisualGroup(icon, num1, first), VisualGroup(icon, num2, second)

    def _build(
        self,
        operation: Operation,
        difficulty: Difficulty,
        num1: int,
        num2: int,
        answer: int,
        groups: tuple[VisualGroup, ...],
    ) -> PracticeProblem:
        return PracticeProblem(
            id=f"{operation.id_prefix}-{int(time.time() * 1000)}-{self.rng.randint(1000, 9999)}",
            operation=operation,
            question_text=f"{num1} {operation.symbol} {num2} = ?",
            operands=(num1, num2),
            answer=answer,
            difficulty=difficulty,
            visual_groups=groups,
        )


_default_generator = ProblemGenerator()


def generate_problem(
    operation: Operation | str,
    difficulty: Difficulty | str = Difficulty.EASY,
    rng: random.Random | None = None,
) -> PracticeProblem:
    """Generate one problem with a shared generator, or with ``rng`` if given."""
    generator = ProblemGenerator(rng) if rng is not None else _default_generator
    return generator.generate(operation, difficulty)


def check_answer(problem: PracticeProblem, answer: int) -> bool:
    return problem.check(answer)
