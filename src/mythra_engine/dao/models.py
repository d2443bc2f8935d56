"""SQLAlchemy models for DAO questions, options and votes."""

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mythra_engine.common.models import Base, TimestampMixin, generate_uuid


class DAOQuestionModel(Base, TimestampMixin):
    __tablename__ = "dao_questions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    event_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("events.id"), nullable=False, index=True
    )
    question_text: Mapped[str] = mapped_column(String(200), nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0)
    created_by: Mapped[str] = mapped_column(String(64), default="")

    options: Mapped[list["DAOOptionModel"]] = relationship(
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="DAOOptionModel.order",
        lazy="selectin",
    )


class DAOOptionModel(Base, TimestampMixin):
    __tablename__ = "dao_options"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    question_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("dao_questions.id"), nullable=False, index=True
    )
    option_text: Mapped[str] = mapped_column(String(100), nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0)

    question: Mapped[DAOQuestionModel] = relationship(back_populates="options")


class DAOVoteModel(Base, TimestampMixin):
    __tablename__ = "dao_votes"
    __table_args__ = (
        UniqueConstraint("investor_id", "question_id", name="uq_vote_investor_question"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    event_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("events.id"), nullable=False, index=True
    )
    question_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("dao_questions.id"), nullable=False, index=True
    )
    option_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("dao_options.id"), nullable=False
    )
    investor_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
