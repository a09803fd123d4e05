"""
Attempt grading.

Pure scoring functions over a quiz's snapshot questions. A stored answer is
a list of 0/1 flags compared positionally with the question's
``correct_options``; an exact match earns the question's full points.
Questions without ``points`` are worth 1, so they weigh equally.
When a question defines ``option_weights``, an inexact answer earns the
weights of its selected options, clamped to ``[0, points]``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence


@dataclass
class QuestionResult:
    question_id: str
    correct: bool
    points_earned: float
    points_possible: float


@dataclass
class GradeReport:
    results: List[QuestionResult] = field(default_factory=list)

    @property
    def score(self) -> float:
        return sum(r.points_earned for r in self.results)

    @property
    def total_quiz_score(self) -> float:
        return sum(r.points_possible for r in self.results)

    @property
    def total_questions(self) -> int:
        return len(self.results)

    @property
    def score_percentage(self) -> float:
        total = self.total_quiz_score
        return round(self.score / total * 100, 2) if total > 0 else 0.0

    @property
    def passed_questions(self) -> List[str]:
        return [r.question_id for r in self.results if r.correct]

    @property
    def failed_questions(self) -> List[str]:
        return [r.question_id for r in self.results if not r.correct]

    def by_question(self) -> Dict[str, QuestionResult]:
        return {r.question_id: r for r in self.results}


def question_points(question: Mapping[str, Any]) -> float:
    points = question.get("points")
    return float(points) if points else 1.0


def is_exact_match(answer: Optional[Sequence[int]], correct_options: Sequence[int]) -> bool:
    if answer is None:
        return False
    return [int(flag) for flag in answer] == [int(flag) for flag in correct_options]


def is_answered(answer: Optional[Sequence[int]], text: Optional[str] = None) -> bool:
    """An answer counts once an option is selected or text is entered."""
    if text and text.strip():
        return True
    return any(int(flag) == 1 for flag in (answer or []))


def score_question(
    question: Mapping[str, Any],
    answer: Optional[Sequence[int]]
) -> QuestionResult:
    possible = question_points(question)
    correct = is_exact_match(answer, question.get("correct_options") or [])

    if correct:
        earned = possible
    else:
        weights = question.get("option_weights")
        earned = 0.0
        if weights and answer:
            earned = sum(
                float(w) for w, flag in zip(weights, answer) if int(flag) == 1
            )
            earned = min(max(earned, 0.0), possible)

    return QuestionResult(
        question_id=str(question["id"]),
        correct=correct,
        points_earned=earned,
        points_possible=possible,
    )


def grade(
    snapshot_questions: Sequence[Mapping[str, Any]],
    answers: Mapping[str, Sequence[int]]
) -> GradeReport:
    """
    Score every snapshot question against the stored answers.

    Args:
        snapshot_questions: the quiz's frozen question set
        answers: question_id -> 0/1 flags; missing questions score 0

    Returns:
        GradeReport with one result per snapshot question, in snapshot order
    """
    report = GradeReport()
    for question in snapshot_questions:
        report.results.append(
            score_question(question, answers.get(str(question["id"])))
        )
    return report
