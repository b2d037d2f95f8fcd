import logging

from flask import current_app
from sqlalchemy import false, or_

from extensions import db
from decodex.errors import NotFound, ValidationError
from decodex.models import ChoiceQuestion, Team
from decodex.models.choice_question import CHOICE_DIFFICULTIES
from decodex.services import catalog_service, completion_service, log_service
from decodex.services.grading_service import normalize_answer

logger = logging.getLogger(__name__)


def _spec_value(spec, *keys):
    for key in keys:
        value = spec.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def _build_choice(question, difficulty, spec):
    if not isinstance(spec, dict):
        raise ValidationError(f"The {difficulty} path is missing")

    text = _spec_value(spec, "question")
    answer = _spec_value(spec, "answer", "correct_answer", "correctAnswer")
    if not text or not normalize_answer(answer):
        raise ValidationError(f"The {difficulty} path needs both a question and an answer")

    default_points = current_app.config.get("DEFAULT_CHOICE_POINTS", {}).get(difficulty, 100)
    try:
        points = int(spec.get("points") if spec.get("points") is not None else default_points)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid points for the {difficulty} path")
    if points < 0:
        raise ValidationError(f"Points for the {difficulty} path cannot be negative")

    return ChoiceQuestion(
        difficulty_level=difficulty,
        title=_spec_value(spec, "title") or f"{difficulty.title()} path: {text[:40]}",
        question=text,
        answer=answer,
        hint=_spec_value(spec, "hint") or None,
        explanation=_spec_value(spec, "explanation") or None,
        type=_spec_value(spec, "type") or "text",
        media_url=_spec_value(spec, "media_url", "mediaUrl") or None,
        points=points,
        category=_spec_value(spec, "category") or question.category,
        is_active=True,
    )


def create_branch(question, easy_spec, hard_spec, commit=True):
    """
    Turns ``question`` into a branch point with an easy and a hard path.

    Both paths are validated before anything is written, so a bad path leaves
    the catalog untouched.
    """
    if question.choices:
        raise ValidationError("Question already has branch paths")

    easy = _build_choice(question, "easy", easy_spec)
    hard = _build_choice(question, "hard", hard_spec)

    question.is_branch_point = True
    question.choices.extend([easy, hard])
    db.session.flush()

    log_service.record("branch", f"Created branch for question {question.id}: easy={easy.id} hard={hard.id}")
    if commit:
        db.session.commit()

    return {"easy_choice_id": easy.id, "hard_choice_id": hard.id}


def get_choices_for(branch_question_id):
    """Returns ``[easy, hard]`` for a branch point."""
    question = catalog_service.get_question_by_id(branch_question_id)
    if not question.is_branch_point:
        raise NotFound(f"Question '{branch_question_id}' is not a branch point")

    by_difficulty = {c.difficulty_level: c for c in question.choices}
    if any(d not in by_difficulty for d in CHOICE_DIFFICULTIES):
        logger.error("Branch point %s is missing a path", branch_question_id)
        raise NotFound(f"Branch point '{branch_question_id}' has no complete pair of paths")
    return [by_difficulty[d] for d in CHOICE_DIFFICULTIES]


def get_choice(branch_question_id, difficulty):
    if difficulty not in CHOICE_DIFFICULTIES:
        raise ValidationError(f"Unknown path '{difficulty}'")
    easy, hard = get_choices_for(branch_question_id)
    return easy if difficulty == "easy" else hard


def delete_branch(branch_question_id, commit=True):
    """
    Removes both paths of a branch point.

    Teams standing on either path, or still picking one, are moved past the
    branch point first so no pointer is left dangling.
    """
    question = catalog_service.get_question_by_id(branch_question_id)
    choice_ids = [c.id for c in question.choices]

    affected = Team.query.filter(
        or_(
            Team.current_question_id.in_(choice_ids) if choice_ids else false(),
            Team.pending_branch_id == question.id,
        )
    ).all()

    fallback = catalog_service.pointer_after(question)
    for team in affected:
        team.current_question_id = None
        team.pending_branch_id = None
        team.current_question = fallback

    for choice in list(question.choices):
        question.choices.remove(choice)
    question.is_branch_point = False
    db.session.flush()

    log_service.record(
        "branch",
        f"Deleted branch of question {question.id}; released {len(affected)} team(s)",
    )
    if commit:
        completion_service.complete_stranded_teams()
    return len(affected)
