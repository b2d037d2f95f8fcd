"""
Admin side of the catalog: create, edit, reorder and delete questions.

Any change to the active sequence shifts positions, so every operation here
snapshots the active ids first and then moves each team's pointer to follow
the question it was standing on. Teams that end up past the last question
are completed before the change is committed.
"""
import logging

from extensions import db
from decodex.errors import ValidationError
from decodex.models import Question, Team
from decodex.models.question import DIFFICULTY_LEVELS, MEDIA_TYPES
from decodex.services import branch_service, catalog_service, completion_service, log_service
from decodex.services.grading_service import normalize_answer

logger = logging.getLogger(__name__)

TYPE_ALIASES = {"file": "document"}


def _text(data, *keys):
    for key in keys:
        value = data.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def _points(value, default=100):
    if value is None or value == "":
        return default
    try:
        points = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid points value: {value}")
    if points < 0:
        raise ValidationError("Points cannot be negative")
    return points


def _media_type(value):
    value = TYPE_ALIASES.get(value, value) or "text"
    if value not in MEDIA_TYPES:
        raise ValidationError(f"Unknown media type '{value}'")
    return value


def _difficulty(value):
    value = value or "normal"
    if value not in DIFFICULTY_LEVELS:
        raise ValidationError(f"Unknown difficulty '{value}'")
    return value


def _next_question(value, own_id=None):
    if not value:
        return None
    if value == own_id:
        raise ValidationError("A question cannot point to itself")
    if not db.session.get(Question, value):
        raise ValidationError(f"Next question '{value}' does not exist")
    return value


def remap_team_pointers(before_ids):
    """
    Moves team pointers from positions in ``before_ids`` to the current sequence.

    A team keeps the question it was on. If that question left the sequence
    it lands on the next surviving one; teams past the end stay past the end.
    """
    after_ids = catalog_service.active_question_ids()
    after_index = {qid: i for i, qid in enumerate(after_ids)}
    surviving = [after_index[qid] for qid in before_ids if qid in after_index]
    end_pointer = (max(surviving) + 1) if surviving else 0

    moved = 0
    for team in Team.query.all():
        pointer = team.current_question or 0
        new_pointer = end_pointer
        for qid in before_ids[pointer:]:
            if qid in after_index:
                new_pointer = after_index[qid]
                break
        if new_pointer != team.current_question:
            team.current_question = new_pointer
            moved += 1

    if moved:
        logger.info("Remapped %d team pointer(s) after catalog change", moved)
    return moved


def _renumber():
    """Reassigns order_index contiguously from 1, keeping the current order."""
    questions = catalog_service.all_questions()
    _assign_order(questions)


def _assign_order(questions):
    # Two passes so the unique constraint never sees a duplicate mid-flush
    for i, q in enumerate(questions):
        q.order_index = -(i + 1)
    db.session.flush()
    for i, q in enumerate(questions):
        q.order_index = i + 1
    db.session.flush()


def create_question(data):
    text = _text(data, "question")
    answer = _text(data, "answer", "correct_answer", "correctAnswer")
    if not text or not normalize_answer(answer):
        raise ValidationError("A question needs both question text and an answer")

    is_branch = bool(data.get("is_branch_point") or data.get("isBranchPoint"))
    easy_spec = data.get("easy_question") or data.get("easyQuestion")
    hard_spec = data.get("hard_question") or data.get("hardQuestion")
    if is_branch and (not easy_spec or not hard_spec):
        raise ValidationError("A branch point needs both an easy and a hard path")

    try:
        before = catalog_service.active_question_ids()
        question = Question(
            order_index=catalog_service.next_order_index(),
            title=_text(data, "title") or (text[:50] + ("..." if len(text) > 50 else "")),
            question=text,
            answer=answer,
            hint=_text(data, "hint") or None,
            explanation=_text(data, "explanation") or None,
            type=_media_type(data.get("type")),
            media_url=_text(data, "media_url", "mediaUrl") or None,
            points=_points(data.get("points")),
            category=_text(data, "category") or "general",
            is_active=bool(data.get("is_active", data.get("isActive", True))),
            difficulty_level=_difficulty(data.get("difficulty_level") or data.get("difficultyLevel")),
            next_question_id=_next_question(data.get("next_question_id") or data.get("nextQuestionId")),
        )
        db.session.add(question)
        db.session.flush()

        if is_branch:
            branch_service.create_branch(question, easy_spec, hard_spec, commit=False)

        remap_team_pointers(before)
        log_service.record("authoring", f"Created question {question.id} at position {question.order_index}")
        completion_service.complete_stranded_teams()
    except Exception:
        db.session.rollback()
        raise

    return question


UPDATABLE_TEXT_FIELDS = {
    "title": ("title",),
    "question": ("question",),
    "answer": ("answer", "correct_answer", "correctAnswer"),
    "hint": ("hint",),
    "explanation": ("explanation",),
    "category": ("category",),
    "media_url": ("media_url", "mediaUrl"),
}


def update_question(question_id, data):
    question = catalog_service.get_question_by_id(question_id)

    try:
        before = catalog_service.active_question_ids()

        for field, keys in UPDATABLE_TEXT_FIELDS.items():
            if any(k in data for k in keys):
                value = _text(data, *keys)
                if field == "answer" and not normalize_answer(value):
                    raise ValidationError("'answer' cannot be empty")
                if field == "question" and not value:
                    raise ValidationError(f"'{field}' cannot be empty")
                if field in ("hint", "explanation", "media_url"):
                    value = value or None
                setattr(question, field, value)

        if "type" in data:
            question.type = _media_type(data.get("type"))
        if "points" in data:
            question.points = _points(data.get("points"))
        if "difficulty_level" in data or "difficultyLevel" in data:
            question.difficulty_level = _difficulty(data.get("difficulty_level") or data.get("difficultyLevel"))
        if "next_question_id" in data or "nextQuestionId" in data:
            question.next_question_id = _next_question(
                data.get("next_question_id") or data.get("nextQuestionId"), own_id=question.id
            )
        if "is_active" in data or "isActive" in data:
            question.is_active = bool(data.get("is_active", data.get("isActive")))

        if "is_branch_point" in data or "isBranchPoint" in data:
            wants_branch = bool(data.get("is_branch_point", data.get("isBranchPoint")))
            if wants_branch and not question.is_branch_point:
                branch_service.create_branch(
                    question,
                    data.get("easy_question") or data.get("easyQuestion"),
                    data.get("hard_question") or data.get("hardQuestion"),
                    commit=False,
                )
            elif not wants_branch and question.is_branch_point:
                branch_service.delete_branch(question.id, commit=False)

        db.session.flush()
        remap_team_pointers(before)
        log_service.record("authoring", f"Updated question {question.id}")
        completion_service.complete_stranded_teams()
    except Exception:
        db.session.rollback()
        raise

    return question


def delete_question(question_id):
    """
    Deletes a question after clearing everything that points at it.

    Order matters: teams and other questions are released first, then the
    derived choice questions, then the question itself.
    """
    question = catalog_service.get_question_by_id(question_id)

    try:
        before = catalog_service.active_question_ids()

        if question.is_branch_point or question.choices:
            branch_service.delete_branch(question.id, commit=False)

        Team.query.filter(Team.current_question_id == question.id) \
            .update({Team.current_question_id: None, Team.version: Team.version + 1}, synchronize_session="fetch")
        Team.query.filter(Team.pending_branch_id == question.id) \
            .update({Team.pending_branch_id: None, Team.version: Team.version + 1}, synchronize_session="fetch")
        Question.query.filter(Question.next_question_id == question.id) \
            .update({Question.next_question_id: None}, synchronize_session="fetch")

        db.session.delete(question)
        db.session.flush()

        _renumber()
        remap_team_pointers(before)
        log_service.record("authoring", f"Deleted question {question_id}")
        completion_service.complete_stranded_teams()
    except Exception:
        db.session.rollback()
        raise


def reorder_questions(question_ids):
    """Applies a full new ordering; ``question_ids`` must name every question once."""
    questions = catalog_service.all_questions()
    by_id = {q.id: q for q in questions}

    if len(question_ids) != len(set(question_ids)) or set(question_ids) != set(by_id):
        raise ValidationError("Reordering must list every question exactly once")

    try:
        before = catalog_service.active_question_ids()
        _assign_order([by_id[qid] for qid in question_ids])
        remap_team_pointers(before)
        log_service.record("authoring", f"Reordered {len(question_ids)} question(s)")
        completion_service.complete_stranded_teams()
    except Exception:
        db.session.rollback()
        raise
