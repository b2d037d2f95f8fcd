from extensions import db
from .question import new_id


CHOICE_DIFFICULTIES = ("easy", "hard")


class ChoiceQuestion(db.Model):
    """One of the two path questions generated for a branch point."""
    __tablename__ = "choice_question"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    branch_question_id = db.Column(
        db.String(36), db.ForeignKey("question.id", ondelete="CASCADE"), nullable=False
    )
    difficulty_level = db.Column(db.String(10), nullable=False)
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

    branch_question = db.relationship("Question", back_populates="choices")

    __table_args__ = (
        db.UniqueConstraint("branch_question_id", "difficulty_level", name="uq_choice_branch_difficulty"),
        db.CheckConstraint("difficulty_level IN ('easy', 'hard')", name="ck_choice_difficulty"),
        db.Index("ix_choice_branch", "branch_question_id"),
    )
