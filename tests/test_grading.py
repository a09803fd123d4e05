import pytest

from lms_quiz.services.grading import (
    grade,
    is_answered,
    is_exact_match,
    question_points,
    score_question,
)

from helpers import DEFAULT_QUESTIONS


def test_question_points_defaults_to_one():
    assert question_points({"id": "q"}) == 1.0
    assert question_points({"id": "q", "points": None}) == 1.0
    assert question_points({"id": "q", "points": 4}) == 4.0


def test_exact_match_is_positional():
    assert is_exact_match([1, 0, 0, 0], [1, 0, 0, 0])
    assert not is_exact_match([0, 1, 0, 0], [1, 0, 0, 0])
    assert not is_exact_match([1, 0, 0], [1, 0, 0, 0])
    assert not is_exact_match(None, [1, 0])


def test_is_answered():
    assert not is_answered([])
    assert not is_answered([0, 0, 0])
    assert is_answered([0, 1, 0])
    assert is_answered([], text="free text")
    assert not is_answered(None, text="   ")


def test_exact_answer_earns_full_points():
    result = score_question(DEFAULT_QUESTIONS[0], [1, 0, 0, 0])
    assert result.correct is True
    assert result.points_earned == 2.0
    assert result.points_possible == 2.0


def test_option_weights_give_partial_credit():
    # One prime selected out of two
    result = score_question(DEFAULT_QUESTIONS[1], [1, 0, 0, 0])
    assert result.correct is False
    assert result.points_earned == pytest.approx(1.5)


def test_partial_credit_is_clamped_at_zero():
    result = score_question(DEFAULT_QUESTIONS[1], [0, 1, 0, 1])
    assert result.points_earned == 0.0


def test_wrong_answer_without_weights_earns_nothing():
    result = score_question(DEFAULT_QUESTIONS[2], [0, 1])
    assert result.correct is False
    assert result.points_earned == 0.0


def test_grade_report_over_snapshot():
    report = grade(DEFAULT_QUESTIONS, {"1": [1, 0, 0, 0], "3": [0, 1]})

    assert report.total_questions == 3
    assert report.total_quiz_score == 6.0
    assert report.score == 2.0
    assert report.score_percentage == pytest.approx(33.33)
    assert report.passed_questions == ["1"]
    assert report.failed_questions == ["2", "3"]


def test_grade_ignores_answers_for_unknown_questions():
    report = grade(DEFAULT_QUESTIONS, {"999": [1, 0]})
    assert report.score == 0.0
    assert set(report.by_question()) == {"1", "2", "3"}


def test_empty_snapshot_has_zero_percentage():
    report = grade([], {})
    assert report.total_quiz_score == 0
    assert report.score_percentage == 0.0
