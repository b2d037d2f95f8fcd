"""Tests for the progression engine: answering, branching, skipping and completion."""

import pytest

from extensions import db
from decodex.errors import Exhausted, InvalidState, NotReady, ValidationError
from decodex.models import PathEntry, Team
from decodex.services import branch_service, progression_service, settings_service


def _team(name="Sherlock"):
    return Team.query.filter_by(name=name).first()


def _place(team, pointer):
    team.current_question = pointer
    db.session.commit()


class TestNextQuestion:

    def test_not_started(self, make_catalog, make_team):
        make_catalog(2)
        make_team()
        with pytest.raises(NotReady):
            progression_service.get_next_question("Sherlock")

    def test_paused(self, make_catalog, make_team, running_quiz):
        make_catalog(2)
        make_team()
        settings_service.set_quiz_paused(True)
        with pytest.raises(NotReady) as exc:
            progression_service.get_next_question("Sherlock")
        assert exc.value.retryable

    def test_payload_never_contains_answer(self, make_catalog, make_team, running_quiz):
        questions = make_catalog(2)
        make_team()
        result = progression_service.get_next_question("Sherlock")
        assert result["status"] == "question"
        assert result["question"]["id"] == questions[0].id
        assert "answer" not in result["question"]

    def test_empty_catalog_is_complete(self, make_team, running_quiz):
        make_team()
        assert progression_service.get_next_question("Sherlock")["status"] == "complete"


class TestSubmitAnswer:

    def test_sherlock_correct(self, make_catalog, make_team, running_quiz):
        make_catalog(5)
        _place(make_team(), 2)

        result = progression_service.submit_answer("Sherlock", "Answer 3")

        assert result["success"] is True
        assert result["points_earned"] == 100
        assert result["is_complete"] is False
        team = _team()
        assert team.current_question == 3
        assert team.score == 100
        assert team.last_answered is not None

    def test_sherlock_wrong(self, make_catalog, make_team, running_quiz):
        make_catalog(5)
        _place(make_team(), 2)

        result = progression_service.submit_answer("Sherlock", "moriarty")

        assert result["success"] is False
        team = _team()
        assert team.current_question == 2
        assert team.score == 0
        assert PathEntry.query.count() == 0

    def test_symbol_only_answer(self, make_question, make_team, running_quiz):
        make_question("Decode the smiley", ":-)")
        make_team()

        result = progression_service.submit_answer("Sherlock", ":-)")

        assert result["success"] is True
        assert result["points_earned"] == 100

    def test_punctuation_matters(self, make_question, make_team, running_quiz):
        make_question("Which language has classes and templates?", "C++")
        make_team()

        assert progression_service.submit_answer("Sherlock", "C")["success"] is False
        assert progression_service.submit_answer("Sherlock", "c++")["success"] is True

    def test_empty_answer(self, make_catalog, make_team, running_quiz):
        make_catalog(1)
        make_team()
        with pytest.raises(ValidationError):
            progression_service.submit_answer("Sherlock", "   ")

    def test_replay_does_not_double_award(self, make_catalog, make_team, running_quiz):
        questions = make_catalog(3)
        make_team()

        progression_service.submit_answer("Sherlock", "answer 1", question_id=questions[0].id)
        with pytest.raises(InvalidState):
            progression_service.submit_answer("Sherlock", "answer 1", question_id=questions[0].id)

        team = _team()
        assert team.score == 100
        assert team.current_question == 1

    def test_path_is_recorded(self, make_catalog, make_team, running_quiz):
        questions = make_catalog(2)
        make_team()
        progression_service.submit_answer("Sherlock", "answer 1")

        entries = _team().path_entries
        assert [e.question_id for e in entries] == [questions[0].id]
        assert entries[0].points == 100
        assert not entries[0].skipped

    def test_next_question_id_jump(self, make_catalog, make_team, running_quiz):
        from decodex.services import authoring_service

        q1, q2, q3, q4 = make_catalog(4)
        authoring_service.update_question(q1.id, {"next_question_id": q3.id})
        make_team()

        progression_service.submit_answer("Sherlock", "answer 1")

        assert progression_service.get_next_question("Sherlock")["question"]["id"] == q3.id


class TestBranching:

    @pytest.fixture
    def forked(self, make_catalog, make_question, make_team, running_quiz):
        make_catalog(4)
        fork = make_question("Fork?", "fork")
        ids = branch_service.create_branch(
            fork,
            {"question": "Easy path?", "answer": "easy", "points": 100},
            {"question": "Hard path?", "answer": "hard", "points": 200},
        )
        after = make_question("After?", "after")
        _place(make_team(), 4)
        return fork, ids, after

    def test_branch_point_offers_two_choices(self, forked):
        fork, ids, after = forked
        result = progression_service.submit_answer("Sherlock", "fork")

        assert result["success"] is True
        assert result["has_choices"] is True
        assert [c["difficulty"] for c in result["branch_choices"]] == ["easy", "hard"]
        assert [c["points"] for c in result["branch_choices"]] == [100, 200]
        team = _team()
        assert team.current_question == 4
        assert team.pending_branch_id == fork.id

    def test_must_choose_before_continuing(self, forked):
        progression_service.submit_answer("Sherlock", "fork")

        assert progression_service.get_next_question("Sherlock")["status"] == "awaiting_choice"
        with pytest.raises(InvalidState):
            progression_service.submit_answer("Sherlock", "easy")

    def test_select_hard(self, forked):
        fork, ids, after = forked
        progression_service.submit_answer("Sherlock", "fork")

        result = progression_service.select_choice("Sherlock", "hard")

        assert result["success"] is True
        assert result["question_id"] == ids["hard_choice_id"]
        assert _team().current_question_id == ids["hard_choice_id"]
        question = progression_service.get_next_question("Sherlock")["question"]
        assert question["id"] == ids["hard_choice_id"]
        assert question["is_choice_question"] is True

    def test_select_twice(self, forked):
        progression_service.submit_answer("Sherlock", "fork")
        progression_service.select_choice("Sherlock", "easy")
        with pytest.raises(InvalidState):
            progression_service.select_choice("Sherlock", "hard")

    def test_select_without_pending_branch(self, forked):
        with pytest.raises(InvalidState):
            progression_service.select_choice("Sherlock", "easy")

    def test_select_unknown_difficulty(self, forked):
        progression_service.submit_answer("Sherlock", "fork")
        with pytest.raises(ValidationError):
            progression_service.select_choice("Sherlock", "medium")

    def test_path_rejoins_after_branch_point(self, forked):
        fork, ids, after = forked
        progression_service.submit_answer("Sherlock", "fork")
        progression_service.select_choice("Sherlock", "hard")

        result = progression_service.submit_answer("Sherlock", "hard")

        assert result["points_earned"] == 200
        team = _team()
        assert team.current_question_id is None
        assert team.score == 300
        assert progression_service.get_next_question("Sherlock")["question"]["id"] == after.id


class TestCompletion:

    def test_finishers_ranked_with_decreasing_bonus(self, make_catalog, make_team, running_quiz):
        make_catalog(10)
        _place(make_team("Holmes"), 9)
        _place(make_team("Watson"), 9)

        first = progression_service.submit_answer("Holmes", "answer 10")
        second = progression_service.submit_answer("Watson", "answer 10")

        assert first["is_complete"] is True
        assert first["completion_rank"] == 1
        assert second["completion_rank"] == 2
        assert first["bonus_points"] > second["bonus_points"] > 0

        holmes = _team("Holmes")
        assert holmes.completion_time is not None
        assert holmes.score == 100 + first["bonus_points"]

    def test_bonus_is_not_multiplied(self, make_catalog, make_team, running_quiz):
        from decodex.services import powerup_service

        make_catalog(1)
        make_team()
        powerup_service.consume("Sherlock", "brainBoost")

        result = progression_service.submit_answer("Sherlock", "answer 1")

        assert result["points_earned"] == 200
        assert result["bonus_points"] == 500
        assert _team().score == 700

    def test_complete_team_cannot_answer(self, make_catalog, make_team, running_quiz):
        make_catalog(1)
        make_team()
        progression_service.submit_answer("Sherlock", "answer 1")

        assert progression_service.get_next_question("Sherlock")["status"] == "complete"
        with pytest.raises(NotReady):
            progression_service.submit_answer("Sherlock", "answer 1")


class TestSkip:

    def test_skip_moves_on_without_points(self, make_catalog, make_team, running_quiz):
        questions = make_catalog(3)
        make_team()

        result = progression_service.skip("Sherlock")

        assert result["skipped"] is True
        assert result["points_earned"] == 0
        team = _team()
        assert team.current_question == 1
        assert team.skip_count == 0
        assert team.score == 0
        assert team.path_entries[0].skipped
        assert team.path_entries[0].question_id == questions[0].id

    def test_skip_exhausted_leaves_state(self, make_catalog, make_team, running_quiz):
        make_catalog(3)
        make_team()
        progression_service.skip("Sherlock")

        with pytest.raises(Exhausted):
            progression_service.skip("Sherlock")

        team = _team()
        assert team.current_question == 1
        assert team.skip_count == 0

    def test_skip_keeps_brain_boost(self, make_catalog, make_team, running_quiz):
        from decodex.services import powerup_service

        make_catalog(3)
        make_team()
        powerup_service.consume("Sherlock", "brainBoost")
        progression_service.skip("Sherlock")

        assert _team().brain_boost_active is True

    def test_skip_to_the_end_gives_no_bonus(self, make_catalog, make_team, running_quiz):
        make_catalog(1)
        make_team()

        result = progression_service.skip("Sherlock")

        assert result["is_complete"] is True
        assert result["bonus_points"] == 0
        team = _team()
        assert team.completion_rank == 1
        assert team.score == 0

    def test_skipping_branch_point_still_offers_paths(self, make_catalog, make_question, make_team,
                                                      running_quiz, branch_data):
        make_catalog(1)
        fork = make_question("Fork?", "fork", is_branch_point=True, **branch_data())
        _place(make_team(), 1)

        result = progression_service.skip("Sherlock")

        assert result["skipped"] is True
        assert result["has_choices"] is True
        assert [c["difficulty"] for c in result["branch_choices"]] == ["easy", "hard"]
        assert _team().pending_branch_id == fork.id
        assert progression_service.get_next_question("Sherlock")["status"] == "awaiting_choice"

        selected = progression_service.select_choice("Sherlock", "hard")

        team = _team()
        assert team.current_question_id == selected["question_id"]
        assert team.pending_branch_id is None
        assert team.path_entries[0].skipped
        assert team.path_entries[0].question_id == fork.id
