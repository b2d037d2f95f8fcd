"""
Read side of the question catalog.

A team's ``current_question`` is a 0-based index into the active questions
ordered by ``order_index``. Inactive questions stay in the table but are not
part of that sequence.
"""
from extensions import db
from decodex.errors import NotFound
from decodex.models import Question


def active_question_ids():
    rows = db.session.query(Question.id).filter(Question.is_active.is_(True)) \
        .order_by(Question.order_index).all()
    return [row[0] for row in rows]


def all_questions():
    return Question.query.order_by(Question.order_index).all()


def count_active():
    return Question.query.filter_by(is_active=True).count()


def get_question_at(ordinal):
    if ordinal is None or ordinal < 0:
        raise NotFound(f"No question at position {ordinal}")
    question = Question.query.filter_by(is_active=True) \
        .order_by(Question.order_index) \
        .offset(ordinal).limit(1).first()
    if not question:
        raise NotFound(f"No question at position {ordinal}")
    return question


def get_question_by_id(question_id):
    question = db.session.get(Question, question_id) if question_id else None
    if not question:
        raise NotFound(f"Question '{question_id}' not found")
    return question


def index_of(question):
    """Position of an active question in the sequence, None if it is not part of it."""
    if not question or not question.is_active:
        return None
    return Question.query.filter(
        Question.is_active.is_(True),
        Question.order_index < question.order_index,
    ).count()


def pointer_after(question):
    """
    Where a team goes after getting past ``question``.

    ``next_question_id`` wins when it names an active question; otherwise the
    team moves to the first active question ordered after this one.
    """
    if question.next_question_id:
        target = db.session.get(Question, question.next_question_id)
        target_index = index_of(target)
        if target_index is not None:
            return target_index
    return Question.query.filter(
        Question.is_active.is_(True),
        Question.order_index <= question.order_index,
    ).count()


def next_order_index():
    max_pos = db.session.query(db.func.max(Question.order_index)).scalar()
    return (max_pos or 0) + 1
