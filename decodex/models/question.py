import uuid

from extensions import db


def new_id():
    return str(uuid.uuid4())


MEDIA_TYPES = ("text", "image", "video", "audio", "document")
DIFFICULTY_LEVELS = ("easy", "normal", "hard", "expert")


class Question(db.Model):
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    order_index = db.Column(db.Integer, nullable=False)
    title = db.Column(db.String(200), default="")
    question = db.Column(db.Text, nullable=False)
    answer = db.Column(db.String(500), nullable=False)
    hint = db.Column(db.String(500), nullable=True)
    explanation = db.Column(db.Text, nullable=True)
    type = db.Column(db.String(20), default="text")
    media_url = db.Column(db.String(500), nullable=True)
    points = db.Column(db.Integer, default=100)
    category = db.Column(db.String(100), default="general")
    is_active = db.Column(db.Boolean, default=True)
    difficulty_level = db.Column(db.String(20), default="normal")
    is_branch_point = db.Column(db.Boolean, default=False)
    next_question_id = db.Column(db.String(36), db.ForeignKey("question.id"), nullable=True)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    choices = db.relationship(
        "ChoiceQuestion",
        back_populates="branch_question",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.UniqueConstraint("order_index", name="uq_question_order_index"),
        db.Index("ix_question_active", "is_active"),
    )
