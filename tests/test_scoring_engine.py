"""
Pytest tests for ScoringEngine
Pure grading rules for single- and multi-choice questions
"""

from types import SimpleNamespace

import pytest

from app.domain.grading_domain import SubmittedAnswer
from app.services.grading import ScoringEngine

SINGLE_ID = 1
MULTI_ID = 2
A, B, C = 11, 12, 13
X, Y, Z = 21, 22, 23


def _questions():
    return {
        SINGLE_ID: SimpleNamespace(id=SINGLE_ID, type="single", text="Pick A"),
        MULTI_ID: SimpleNamespace(id=MULTI_ID, type="multi", text="Pick X and Y"),
    }


CORRECT = {SINGLE_ID: [A], MULTI_ID: [X, Y]}


class TestSingleChoice:
    """A single-choice question is right only with exactly the correct choice"""

    @pytest.mark.parametrize(
        "submitted, expected",
        [
            ([A], True),
            ([B], False),
            ([], False),
            ([A, B], False),
            ([B, A], False),
        ],
    )
    def test_single_choice_rules(self, submitted, expected):
        result = ScoringEngine.score(
            [SubmittedAnswer(SINGLE_ID, submitted)], _questions(), CORRECT
        )
        assert result.per_question[SINGLE_ID] is expected
        assert result.correct_count == (1 if expected else 0)


class TestMultiChoice:
    """A multi-choice question needs the exact correct set, no partial credit"""

    @pytest.mark.parametrize(
        "submitted, expected",
        [
            ([X, Y], True),
            ([Y, X], True),
            ([X, Y, Y], True),
            ([X], False),
            ([X, Y, Z], False),
            ([Z], False),
            ([], False),
        ],
    )
    def test_multi_choice_rules(self, submitted, expected):
        result = ScoringEngine.score(
            [SubmittedAnswer(MULTI_ID, submitted)], _questions(), CORRECT
        )
        assert result.per_question[MULTI_ID] is expected


class TestAggregateScore:
    def test_all_correct_scores_100(self):
        result = ScoringEngine.score(
            [SubmittedAnswer(SINGLE_ID, [A]), SubmittedAnswer(MULTI_ID, [X, Y])],
            _questions(),
            CORRECT,
        )
        assert result.score == 100
        assert result.correct_count == 2
        assert result.total_questions == 2

    def test_all_wrong_scores_0(self):
        result = ScoringEngine.score(
            [SubmittedAnswer(SINGLE_ID, [B]), SubmittedAnswer(MULTI_ID, [X])],
            _questions(),
            CORRECT,
        )
        assert result.score == 0
        assert result.correct_count == 0

    def test_unanswered_question_counts_in_denominator(self):
        result = ScoringEngine.score(
            [SubmittedAnswer(SINGLE_ID, [A])], _questions(), CORRECT
        )
        assert result.score == 50
        assert MULTI_ID not in result.per_question

    def test_no_questions_scores_zero_without_division_error(self):
        result = ScoringEngine.score([], {}, {})
        assert result.score == 0
        assert result.correct_count == 0
        assert result.total_questions == 0

    def test_question_without_correct_choice_is_never_correct(self):
        result = ScoringEngine.score(
            [SubmittedAnswer(SINGLE_ID, [A])], _questions(), {MULTI_ID: [X, Y]}
        )
        assert result.per_question[SINGLE_ID] is False
        assert result.correct_count == 0

    def test_last_answer_for_a_question_wins(self):
        result = ScoringEngine.score(
            [SubmittedAnswer(SINGLE_ID, [B]), SubmittedAnswer(SINGLE_ID, [A])],
            _questions(),
            CORRECT,
        )
        assert result.per_question[SINGLE_ID] is True

    def test_same_inputs_give_same_result(self):
        answers = [SubmittedAnswer(SINGLE_ID, [A]), SubmittedAnswer(MULTI_ID, [Y, X])]
        first = ScoringEngine.score(answers, _questions(), CORRECT)
        second = ScoringEngine.score(answers, _questions(), CORRECT)
        assert first == second
        # Inputs are left untouched
        assert answers[1].choice_ids == [Y, X]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
