from decodex.models import ChoiceQuestion, Question
from decodex.services.grading_service import apply_multiplier


CHOICE_ICONS = {"easy": "compass", "hard": "skull"}
CHOICE_TITLES = {"easy": "The Safe Path", "hard": "The Perilous Path"}


def _truncate(text, length=50):
    text = text or ""
    return text if len(text) <= length else text[:length] + "..."


def get_question_payload(question, boosted=False):
    """Player facing view of a question or choice question. Never carries the answer."""
    is_choice = isinstance(question, ChoiceQuestion)
    is_branch = bool(getattr(question, "is_branch_point", False))
    if is_choice:
        kind = "choice"
    elif is_branch:
        kind = "branch_point"
    else:
        kind = "question"

    base_points = int(question.points or 0)
    payload = {
        "id": question.id,
        "kind": kind,
        "title": question.title or _truncate(question.question),
        "question": question.question or "",
        "hint": question.hint or "",
        "type": question.type or "text",
        "media_url": question.media_url or "",
        "points": apply_multiplier(base_points, boosted),
        "base_points": base_points,
        "boost_active": bool(boosted),
        "category": question.category or "",
        "difficulty_level": question.difficulty_level or "normal",
        "is_branch_point": is_branch,
        "is_choice_question": is_choice,
    }
    if isinstance(question, Question):
        payload["order_index"] = question.order_index
    return payload


def get_question_choice(choice):
    """QuestionChoice projection offered to a team after solving a branch point."""
    return {
        "id": choice.id,
        "title": CHOICE_TITLES.get(choice.difficulty_level, choice.difficulty_level.title()),
        "description": _truncate(choice.title or choice.question, 80),
        "difficulty": choice.difficulty_level,
        "points": int(choice.points or 0),
        "icon": CHOICE_ICONS.get(choice.difficulty_level, "question"),
        "question_id": choice.branch_question_id,
    }


def get_question_display(question):
    """Admin view, including the answer and branch details."""
    base = {
        "id": question.id,
        "order_index": question.order_index,
        "title": question.title,
        "question": question.question,
        "answer": question.answer,
        "hint": question.hint or "",
        "explanation": question.explanation or "",
        "type": question.type,
        "media_url": question.media_url or "",
        "points": int(question.points or 0),
        "category": question.category,
        "is_active": bool(question.is_active),
        "difficulty_level": question.difficulty_level,
        "is_branch_point": bool(question.is_branch_point),
        "next_question_id": question.next_question_id,
        "choices": [],
    }

    if question.is_branch_point:
        base["choices"] = [get_choice_display(c) for c in sorted(question.choices, key=_difficulty_key)]

    return base


def get_choice_display(choice):
    return {
        "id": choice.id,
        "branch_question_id": choice.branch_question_id,
        "difficulty_level": choice.difficulty_level,
        "title": choice.title,
        "question": choice.question,
        "answer": choice.answer,
        "hint": choice.hint or "",
        "type": choice.type,
        "media_url": choice.media_url or "",
        "points": int(choice.points or 0),
        "category": choice.category,
        "is_active": bool(choice.is_active),
    }


def _difficulty_key(choice):
    return 0 if choice.difficulty_level == "easy" else 1
