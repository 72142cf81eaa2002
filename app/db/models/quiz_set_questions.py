from __future__ import annotations

from uuid import UUID

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Integer, SmallInteger, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class QuizSetQuestion(Base):
    __tablename__ = "quiz_set_questions"
    __table_args__ = (
        CheckConstraint("position >= 0", name="ck_quiz_set_questions_position_non_negative"),
        CheckConstraint(
            "correct_choice_index >= 0",
            name="ck_quiz_set_questions_correct_choice_non_negative",
        ),
        UniqueConstraint("quiz_set_id", "position", name="uq_quiz_set_questions_set_position"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    quiz_set_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("quiz_sets.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    choices: Mapped[list[str]] = mapped_column(JSONB, nullable=False)
    correct_choice_index: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    explanation: Mapped[str | None] = mapped_column(Text, nullable=True)
