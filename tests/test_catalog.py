"""Tests for catalog reads and the authoring operations that reshape it."""

import pytest

from extensions import db
from decodex.errors import NotFound, ValidationError
from decodex.models import ChoiceQuestion, Question, Team
from decodex.services import authoring_service, catalog_service, progression_service


class TestCatalogReads:

    def test_questions_get_increasing_positions(self, make_catalog):
        questions = make_catalog(3)
        assert [q.order_index for q in questions] == [1, 2, 3]
        assert catalog_service.active_question_ids() == [q.id for q in questions]

    def test_get_question_at(self, make_catalog):
        questions = make_catalog(3)
        assert catalog_service.get_question_at(1).id == questions[1].id
        with pytest.raises(NotFound):
            catalog_service.get_question_at(3)
        with pytest.raises(NotFound):
            catalog_service.get_question_at(-1)

    def test_inactive_questions_are_not_in_sequence(self, make_question):
        make_question("One?", "one")
        make_question("Two?", "two", is_active=False)
        make_question("Three?", "three")
        assert catalog_service.count_active() == 2
        assert catalog_service.get_question_at(1).answer == "three"

    def test_pointer_after_follows_next_question_id(self, make_catalog):
        q1, q2, q3 = make_catalog(3)
        assert catalog_service.pointer_after(q1) == 1
        authoring_service.update_question(q1.id, {"next_question_id": q3.id})
        assert catalog_service.pointer_after(q1) == 2

    def test_pointer_after_ignores_inactive_target(self, make_catalog):
        q1, q2, q3 = make_catalog(3)
        authoring_service.update_question(q1.id, {"next_question_id": q3.id})
        authoring_service.update_question(q3.id, {"is_active": False})
        assert catalog_service.pointer_after(q1) == 1

    def test_unknown_question(self, ctx):
        with pytest.raises(NotFound):
            catalog_service.get_question_by_id("missing")


class TestCreateQuestion:

    def test_requires_text_and_answer(self, ctx):
        with pytest.raises(ValidationError):
            authoring_service.create_question({"question": "No answer?"})
        assert Question.query.count() == 0

    def test_answer_must_survive_normalization(self, ctx):
        with pytest.raises(ValidationError):
            authoring_service.create_question({"question": "Blank?", "answer": "   "})
        with pytest.raises(ValidationError):
            authoring_service.create_question({"question": "Accent only?", "answer": "\u0301"})
        assert Question.query.count() == 0

    def test_symbol_answer_accepted(self, ctx):
        question = authoring_service.create_question({"question": "Decode the smiley", "answer": ":-)"})
        assert question.answer == ":-)"

    def test_update_rejects_blank_answer(self, make_catalog):
        q1, = make_catalog(1)
        with pytest.raises(ValidationError):
            authoring_service.update_question(q1.id, {"answer": "  "})
        assert db.session.get(Question, q1.id).answer == "answer 1"

    def test_accepts_camel_case_and_file_alias(self, ctx):
        question = authoring_service.create_question({
            "question": "Which file?",
            "correctAnswer": "report",
            "type": "file",
            "mediaUrl": "/files/report.pdf",
            "difficultyLevel": "hard",
        })
        assert question.answer == "report"
        assert question.type == "document"
        assert question.media_url == "/files/report.pdf"
        assert question.difficulty_level == "hard"

    def test_negative_points_rejected(self, ctx):
        with pytest.raises(ValidationError):
            authoring_service.create_question({"question": "Q?", "answer": "a", "points": -5})

    def test_branch_point_needs_both_paths(self, ctx):
        with pytest.raises(ValidationError):
            authoring_service.create_question({
                "question": "Fork?",
                "answer": "fork",
                "is_branch_point": True,
                "easy_question": {"question": "Easy?", "answer": "e"},
            })
        assert Question.query.count() == 0
        assert ChoiceQuestion.query.count() == 0

    def test_branch_point_with_paths(self, make_question, branch_data):
        question = make_question("Fork?", "fork", is_branch_point=True, **branch_data())
        assert question.is_branch_point
        assert sorted(c.difficulty_level for c in question.choices) == ["easy", "hard"]

    def test_unknown_next_question(self, ctx):
        with pytest.raises(ValidationError):
            authoring_service.create_question({"question": "Q?", "answer": "a", "next_question_id": "nope"})


class TestPointerRemap:

    def _place(self, team, pointer):
        team.current_question = pointer
        db.session.commit()

    def test_reorder_keeps_team_on_its_question(self, make_catalog, make_team):
        q1, q2, q3 = make_catalog(3)
        team = make_team()
        self._place(team, 1)

        authoring_service.reorder_questions([q2.id, q1.id, q3.id])

        team = Team.query.filter_by(name="Sherlock").first()
        assert team.current_question == 0
        assert catalog_service.get_question_at(team.current_question).id == q2.id

    def test_reorder_must_list_every_question(self, make_catalog):
        q1, q2, q3 = make_catalog(3)
        with pytest.raises(ValidationError):
            authoring_service.reorder_questions([q1.id, q2.id])
        with pytest.raises(ValidationError):
            authoring_service.reorder_questions([q1.id, q1.id, q2.id])

    def test_delete_earlier_question_shifts_pointer(self, make_catalog, make_team):
        q1, q2, q3 = make_catalog(3)
        team = make_team()
        self._place(team, 2)

        authoring_service.delete_question(q1.id)

        team = Team.query.filter_by(name="Sherlock").first()
        assert team.current_question == 1
        assert catalog_service.get_question_at(1).id == q3.id
        assert [q.order_index for q in catalog_service.all_questions()] == [1, 2]

    def test_delete_current_question_moves_to_next(self, make_catalog, make_team):
        q1, q2, q3 = make_catalog(3)
        team = make_team()
        self._place(team, 1)

        authoring_service.delete_question(q2.id)

        team = Team.query.filter_by(name="Sherlock").first()
        assert catalog_service.get_question_at(team.current_question).id == q3.id

    def test_deactivating_question_moves_team_on(self, make_catalog, make_team):
        q1, q2, q3 = make_catalog(3)
        team = make_team()
        self._place(team, 1)

        authoring_service.update_question(q2.id, {"is_active": False})

        team = Team.query.filter_by(name="Sherlock").first()
        assert catalog_service.get_question_at(team.current_question).id == q3.id

    def test_insert_does_not_move_finished_team_back(self, make_catalog, make_team, make_question):
        make_catalog(2)
        team = make_team()
        self._place(team, 2)

        make_question("Late addition?", "late")

        team = Team.query.filter_by(name="Sherlock").first()
        assert team.current_question == 2

    def test_delete_clears_next_question_links(self, make_catalog):
        q1, q2, q3 = make_catalog(3)
        authoring_service.update_question(q1.id, {"next_question_id": q3.id})
        authoring_service.delete_question(q3.id)
        assert db.session.get(Question, q1.id).next_question_id is None


class TestCompletionAfterCatalogChange:

    @pytest.fixture
    def two_answered(self, make_catalog, make_team, running_quiz):
        questions = make_catalog(3)
        make_team()
        progression_service.submit_answer("Sherlock", "answer 1")
        progression_service.submit_answer("Sherlock", "answer 2")
        return questions

    def _assert_completed_first(self):
        team = Team.query.filter_by(name="Sherlock").first()
        assert team.completion_time is not None
        assert team.completion_rank == 1
        assert team.bonus_points == 500
        assert team.score == 700
        result = progression_service.get_next_question("Sherlock")
        assert result["status"] == "complete"
        assert result["completion_rank"] == 1

    def test_deleting_last_question_completes_team(self, two_answered):
        authoring_service.delete_question(two_answered[2].id)
        self._assert_completed_first()

    def test_deactivating_last_question_completes_team(self, two_answered):
        authoring_service.update_question(two_answered[2].id, {"is_active": False})
        self._assert_completed_first()

    def test_team_that_never_started_is_left_alone(self, make_catalog, make_team, running_quiz):
        q1, = make_catalog(1)
        make_team()

        authoring_service.delete_question(q1.id)

        team = Team.query.filter_by(name="Sherlock").first()
        assert team.completion_time is None
        assert team.completion_rank is None

    def test_stranded_teams_ranked_by_arrival(self, make_catalog, make_team, running_quiz):
        questions = make_catalog(2)
        make_team("Holmes")
        make_team("Watson")
        progression_service.submit_answer("Holmes", "answer 1")
        progression_service.submit_answer("Watson", "answer 1")

        authoring_service.delete_question(questions[1].id)

        assert Team.query.filter_by(name="Holmes").first().completion_rank == 1
        assert Team.query.filter_by(name="Watson").first().completion_rank == 2

    def test_removing_branch_on_last_question_completes_team(
            self, make_catalog, make_question, make_team, running_quiz, branch_data):
        make_catalog(1)
        fork = make_question("Fork?", "fork", is_branch_point=True, **branch_data())
        make_team()
        progression_service.submit_answer("Sherlock", "answer 1")
        progression_service.submit_answer("Sherlock", "fork")
        progression_service.select_choice("Sherlock", "easy")

        authoring_service.delete_question(fork.id)

        team = Team.query.filter_by(name="Sherlock").first()
        assert team.current_question_id is None
        assert team.completion_rank == 1
