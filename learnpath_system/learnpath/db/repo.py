# learnpath/db/repo.py

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.core.ids import new_id
from learnpath.db.models import LearningGoal, Lesson, StudyPlanRecord
from learnpath.llm.schemas import Plan


async def create_goal(
    db: AsyncSession,
    user_id: str,
    title: str,
    description: str | None = None,
    category: str | None = None,
    difficulty: int | None = None,
    plan: Plan | None = None,
) -> LearningGoal:
    goal = LearningGoal(
        id=new_id("goal"),
        user_id=user_id,
        title=title,
        description=description,
        category=category,
        difficulty=difficulty,
        progress=0,
        hours_spent=0,
    )
    db.add(goal)

    if plan is not None:
        for idx, step in enumerate(plan.steps):
            db.add(
                Lesson(
                    id=new_id("lesson"),
                    goal_id=goal.id,
                    title=step.title,
                    description=step.description,
                    duration_minutes=step.duration_minutes or 60,
                    order_index=idx,
                    completed=False,
                    resources=[r.model_dump(by_alias=True, exclude_none=True) for r in step.resources],
                )
            )
        db.add(
            StudyPlanRecord(
                id=new_id("plan"),
                user_id=user_id,
                goal_id=goal.id,
                goal_title=title,
                plan_data=plan.to_wire(),
            )
        )

    await db.commit()
    # reload so lessons are attached in order
    return await get_goal(db, goal.id, user_id)


async def list_goals(db: AsyncSession, user_id: str) -> list[LearningGoal]:
    res = await db.execute(
        select(LearningGoal)
        .where(LearningGoal.user_id == user_id)
        .order_by(LearningGoal.created_at.desc())
    )
    return list(res.scalars().all())


async def get_goal(db: AsyncSession, goal_id: str, user_id: str) -> LearningGoal | None:
    res = await db.execute(
        select(LearningGoal)
        .where(LearningGoal.id == goal_id, LearningGoal.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return res.scalar_one_or_none()


async def set_lesson_completion(
    db: AsyncSession, lesson_id: str, completed: bool, *, goal_id: str | None = None
) -> bool:
    stmt = update(Lesson).where(Lesson.id == lesson_id)
    if goal_id is not None:
        stmt = stmt.where(Lesson.goal_id == goal_id)
    res = await db.execute(stmt.values(completed=completed))
    await db.commit()
    return res.rowcount > 0


async def recalculate_progress(db: AsyncSession, goal_id: str) -> int:
    res = await db.execute(select(Lesson.completed).where(Lesson.goal_id == goal_id))
    flags = list(res.scalars().all())
    total = len(flags)
    done = sum(1 for f in flags if f)
    # half rounds up (12.5 -> 13)
    progress = int(done * 100 / total + 0.5) if total else 0

    await db.execute(update(LearningGoal).where(LearningGoal.id == goal_id).values(progress=progress))
    await db.commit()
    return progress


def goal_to_dict(goal: LearningGoal) -> dict[str, Any]:
    return {
        "id": goal.id,
        "title": goal.title,
        "description": goal.description,
        "category": goal.category,
        "difficulty": goal.difficulty,
        "progress": goal.progress,
        "hoursSpent": goal.hours_spent,
        "createdAt": goal.created_at.isoformat() if goal.created_at else None,
        "lessons": [
            {
                "id": l.id,
                "title": l.title,
                "description": l.description,
                "durationMinutes": l.duration_minutes,
                "completed": l.completed,
                "orderIndex": l.order_index,
                "resources": l.resources or [],
            }
            for l in goal.lessons
        ],
    }
