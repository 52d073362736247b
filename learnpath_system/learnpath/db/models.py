"""
Database table definitions and it stores:
- Learning goals (with progress)
- Lessons (one per plan step, with resources)
- Raw generated plans
Main purpose:
Define persistent data structure for the goal store.
"""



from sqlalchemy import String, Text, Integer, DateTime, Boolean, ForeignKey, JSON, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime, timezone
from learnpath.db.base import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class LearningGoal(Base):
    __tablename__ = "learning_goals"
    __table_args__ = (
        CheckConstraint("difficulty IS NULL OR difficulty BETWEEN 1 AND 3", name="ck_goal_difficulty"),
        CheckConstraint("progress BETWEEN 0 AND 100", name="ck_goal_progress"),
    )
    id: Mapped[str] = mapped_column(String, primary_key=True)
    user_id: Mapped[str] = mapped_column(String, index=True)
    title: Mapped[str] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String, nullable=True)
    difficulty: Mapped[int | None] = mapped_column(Integer, nullable=True)
    progress: Mapped[int] = mapped_column(Integer, default=0)
    hours_spent: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)

    lessons = relationship(
        "Lesson",
        back_populates="goal",
        cascade="all, delete-orphan",
        order_by="Lesson.order_index",
        lazy="selectin",
    )


class Lesson(Base):
    __tablename__ = "lessons"
    id: Mapped[str] = mapped_column(String, primary_key=True)
    goal_id: Mapped[str] = mapped_column(String, ForeignKey("learning_goals.id"), index=True)
    title: Mapped[str] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration_minutes: Mapped[int] = mapped_column(Integer, default=0)
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    order_index: Mapped[int] = mapped_column(Integer)
    resources: Mapped[list] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    goal = relationship("LearningGoal", back_populates="lessons")


class StudyPlanRecord(Base):
    __tablename__ = "study_plans"
    id: Mapped[str] = mapped_column(String, primary_key=True)
    user_id: Mapped[str] = mapped_column(String, index=True)
    goal_id: Mapped[str] = mapped_column(String, ForeignKey("learning_goals.id"), index=True)
    goal_title: Mapped[str] = mapped_column(Text)
    plan_data: Mapped[dict] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
