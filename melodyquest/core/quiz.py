from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class QuizChoice:
    text: str
    correct: bool = False


@dataclass(frozen=True)
class Quiz:
    """Multiple-choice question whose correct answer grants ``reward`` once."""

    question: str
    choices: Tuple[QuizChoice, ...]
    reward: str

    def is_correct(self, choice_index: int) -> bool:
        if not 0 <= choice_index < len(self.choices):
            raise IndexError(f"Quiz has no choice {choice_index}")
        return self.choices[choice_index].correct


@dataclass(frozen=True)
class QuizOutcome:
    """Result of answering a quiz: whether it was right and whether it paid out."""

    correct: bool
    granted: bool = False
    already_completed: bool = False


__all__ = ["Quiz", "QuizChoice", "QuizOutcome"]
