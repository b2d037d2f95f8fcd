"""Tests for answer normalization and the completion bonus schedule."""

from decodex.services.grading_service import (
    answers_match,
    apply_multiplier,
    completion_bonus_for_rank,
    normalize_answer,
)


class TestNormalizeAnswer:

    def test_case_accents_and_punctuation(self):
        assert normalize_answer("  Élémentary,  Watson! ") == "elementary, watson!"

    def test_empty(self):
        assert normalize_answer("") == ""
        assert normalize_answer(None) == ""


class TestAnswersMatch:

    def test_exact_after_normalization(self):
        assert answers_match("baker street", "Baker Street")
        assert answers_match("Elementary,  Watson!", "elementary, watson!")

    def test_punctuation_is_significant(self):
        assert not answers_match("C", "C++")
        assert not answers_match("3 14", "3.14")
        assert not answers_match("Baker-Street", "baker street")

    def test_symbol_only_answers(self):
        assert normalize_answer(":-)") == ":-)"
        assert answers_match(":-)", ":-)")
        assert not answers_match(":-(", ":-)")

    def test_near_miss_rejected_by_default(self):
        assert not answers_match("bakr street", "Baker Street")

    def test_near_miss_accepted_with_lower_threshold(self):
        assert answers_match("bakr street", "Baker Street", threshold=0.85)

    def test_blank_never_matches(self):
        assert not answers_match("   ", "")
        assert not answers_match("\u0301", "")


class TestCompletionBonus:

    def test_schedule_by_rank(self):
        schedule = [500, 300, 200, 100]
        assert completion_bonus_for_rank(1, schedule) == 500
        assert completion_bonus_for_rank(2, schedule) == 300
        assert completion_bonus_for_rank(4, schedule) == 100

    def test_floor_past_schedule(self):
        assert completion_bonus_for_rank(5, [500, 300]) == 0
        assert completion_bonus_for_rank(5, [500, 300], floor=50) == 50

    def test_invalid_rank(self):
        assert completion_bonus_for_rank(0, [500]) == 0
        assert completion_bonus_for_rank(None, [500]) == 0


def test_multiplier_doubles_only_when_boosted():
    assert apply_multiplier(100, False) == 100
    assert apply_multiplier(100, True) == 200
    assert apply_multiplier(None, True) == 0
