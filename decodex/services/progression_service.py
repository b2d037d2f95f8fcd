"""
Per-team progression through the question sequence.

A team is always in one of three states:

* ``awaiting_question``: its pointer resolves to a main question (by index)
  or to the path question it picked (by ``current_question_id``).
* ``awaiting_choice``: it just got past a branch point and has to pick the
  easy or the hard path before anything else.
* ``complete``: it is past the last active question.

Every mutating operation runs inside ``store.team_transaction`` so score,
pointer, power-ups and the path log change together or not at all.
"""
import datetime
import logging

from flask import current_app

from extensions import db
from decodex.errors import Exhausted, InvalidState, NotReady, ValidationError
from decodex.models import ChoiceQuestion, PathEntry, Question
from decodex.models.choice_question import CHOICE_DIFFICULTIES
from decodex.services import branch_service, catalog_service, completion_service, settings_service, store
from decodex.services.grading_service import answers_match, apply_multiplier
from decodex.services.question_service import get_question_choice, get_question_payload
from decodex.services.team_service import team_state

logger = logging.getLogger(__name__)


def _resolve_current(team, repair=False):
    """The question the team is standing on, or None once past the end."""
    if team.current_question_id:
        choice = db.session.get(ChoiceQuestion, team.current_question_id)
        if choice:
            return choice
        logger.warning(
            "Team %s points at missing choice %s, falling back to position %s",
            team.name, team.current_question_id, team.current_question,
        )
        if repair:
            team.current_question_id = None

    if team.current_question >= catalog_service.count_active():
        return None
    return catalog_service.get_question_at(team.current_question)


def current_question(team):
    return _resolve_current(team)


def _pending_choices(team):
    choices = branch_service.get_choices_for(team.pending_branch_id)
    return [get_question_choice(c) for c in choices]


def _advance(team, question, now, award_bonus):
    """Moves the team past ``question``; branch points stop and offer the paths instead."""
    if isinstance(question, Question) and question.is_branch_point:
        choices = branch_service.get_choices_for(question.id)
        team.pending_branch_id = question.id
        return {
            "has_choices": True,
            "branch_choices": [get_question_choice(c) for c in choices],
        }

    if isinstance(question, ChoiceQuestion):
        # Both paths rejoin the main sequence after their branch point
        team.current_question_id = None
        team.current_question = catalog_service.pointer_after(question.branch_question)
    else:
        team.current_question = catalog_service.pointer_after(question)

    if team.current_question >= catalog_service.count_active():
        return completion_service.complete_team(team, now, award_bonus)
    return {}


def _check_can_progress(team):
    state = team_state(team)
    if state == "complete":
        raise NotReady("Team has already completed the quiz")
    if state == "awaiting_choice":
        raise InvalidState("Pick a path before continuing")


def get_next_question(team_name, settings=None):
    settings_service.ensure_running(settings)
    team = store.get_team(team_name)
    state = team_state(team)

    if state == "awaiting_choice":
        return {
            "status": "awaiting_choice",
            "branch_choices": _pending_choices(team),
            "power_ups": team.power_ups,
        }

    question = None if state == "complete" else _resolve_current(team)
    if question is None:
        return {
            "status": "complete",
            "score": int(team.score or 0),
            "completion_rank": team.completion_rank,
            "bonus_points": int(team.bonus_points or 0),
        }

    return {
        "status": "question",
        "question": get_question_payload(question, boosted=team.brain_boost_active),
        "power_ups": team.power_ups,
    }


def submit_answer(team_name, raw_answer, question_id=None, settings=None):
    """
    Checks ``raw_answer`` against the team's current question.

    ``question_id`` is the question the caller believes it is answering. When
    the team has already moved on, the call is rejected instead of scoring
    the same question twice.
    """
    answer = (raw_answer or "").strip()
    if not answer:
        raise ValidationError("Answer cannot be empty")
    settings_service.ensure_running(settings)

    with store.team_transaction(team_name) as team:
        _check_can_progress(team)
        question = _resolve_current(team, repair=True)
        if question is None:
            raise NotReady("Team has already completed the quiz")
        if question_id and question_id != question.id:
            raise InvalidState("That question was already answered; the team has moved on")

        threshold = current_app.config.get("ANSWER_MATCH_THRESHOLD", 1.0)
        if not answers_match(answer, question.answer, threshold):
            logger.debug("Team %s answered question %s incorrectly", team.name, question.id)
            return {"success": False, "question_id": question.id}

        now = datetime.datetime.utcnow()
        points = apply_multiplier(question.points, team.brain_boost_active)
        team.brain_boost_active = False
        team.score = (team.score or 0) + points
        team.last_answered = now
        team.path_entries.append(PathEntry(
            question_id=question.id,
            is_choice_question=isinstance(question, ChoiceQuestion),
            answer=answer,
            skipped=False,
            points=points,
            timestamp=now,
        ))

        result = {
            "success": True,
            "question_id": question.id,
            "points_earned": points,
            "bonus_points": 0,
            "completion_rank": None,
            "is_complete": False,
            "has_choices": False,
        }
        result.update(_advance(team, question, now, award_bonus=True))

    result["score"] = int(team.score or 0)
    logger.info("Team %s solved question %s for %s point(s)", team_name, result["question_id"], points)
    return result


def select_choice(team_name, difficulty):
    difficulty = (difficulty or "").strip().lower()
    if difficulty not in CHOICE_DIFFICULTIES:
        raise ValidationError(f"Unknown path '{difficulty}', expected easy or hard")

    with store.team_transaction(team_name) as team:
        if not team.pending_branch_id:
            raise InvalidState("No path choice is pending for this team")
        choice = branch_service.get_choice(team.pending_branch_id, difficulty)
        team.current_question_id = choice.id
        team.pending_branch_id = None
        payload = get_question_choice(choice)

    logger.info("Team %s picked the %s path (%s)", team_name, difficulty, payload["id"])
    return {"success": True, "choice": payload, "question_id": payload["id"]}


def skip(team_name, settings=None):
    """
    Uses one skip to get past the current question without scoring it.

    The team moves on exactly as after a correct answer, so skipping a
    branch point still offers the two paths.
    """
    settings_service.ensure_running(settings)

    with store.team_transaction(team_name) as team:
        _check_can_progress(team)
        if team.skip_count <= 0:
            raise Exhausted("No skips left")
        question = _resolve_current(team, repair=True)
        if question is None:
            raise NotReady("Team has already completed the quiz")

        now = datetime.datetime.utcnow()
        team.skip_count -= 1
        if current_app.config.get("SKIP_CONSUMES_BRAIN_BOOST", False):
            team.brain_boost_active = False
        team.last_answered = now
        team.path_entries.append(PathEntry(
            question_id=question.id,
            is_choice_question=isinstance(question, ChoiceQuestion),
            answer="",
            skipped=True,
            points=0,
            timestamp=now,
        ))

        result = {
            "success": True,
            "skipped": True,
            "question_id": question.id,
            "points_earned": 0,
            "bonus_points": 0,
            "completion_rank": None,
            "is_complete": False,
            "has_choices": False,
        }
        result.update(_advance(team, question, now, award_bonus=False))

    result["score"] = int(team.score or 0)
    logger.info("Team %s skipped question %s", team_name, result["question_id"])
    return result
