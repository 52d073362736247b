from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.agent.planner import PlanOrchestrator
from learnpath.api.auth import require_user
from learnpath.api.types import CreateGoalRequest, UpdateProgressRequest, parse_goal_request
from learnpath.core.errors import GoalNotFoundError, InputError, PlanValidationError
from learnpath.core.logging import get_logger
from learnpath.db.repo import (
    create_goal,
    get_goal,
    goal_to_dict,
    list_goals,
    recalculate_progress,
    set_lesson_completion,
)
from learnpath.llm.plan_check import validate_plan
from learnpath.llm.schemas import PlanState


"""
FastAPI routes for the learning-path service.
What it provides:
- Generate a study plan from a goal
- Create goals (optionally with a plan)
- List / fetch goals
- Mark lessons complete and recompute progress

And, the main purpose:
Expose plan generation and the goal store over HTTP.
"""

log = get_logger("api.routes")
router = APIRouter()


def get_orchestrator(request: Request) -> PlanOrchestrator:
    return request.app.state.orchestrator


async def get_db(request: Request):
    async with request.app.state.sessionmaker() as db:
        yield db


@router.options("/{path:path}")
async def api_preflight(path: str):
    return Response(status_code=200)


@router.post("/study-plans/generate")
async def api_generate_plan(
    request: Request,
    save: bool = False,
    user_id: str = Depends(require_user),
    orchestrator: PlanOrchestrator = Depends(get_orchestrator),
):
    try:
        raw = await request.json()
    except ValueError:
        raise InputError("Request body must be valid JSON")
    goal = parse_goal_request(raw)

    result = await orchestrator.generate(goal)
    plan = result.plan
    headers = {"X-Plan-Source": "fallback" if result.state == PlanState.FALLBACK else "generated"}

    if save:
        async with request.app.state.sessionmaker() as db:
            saved = await create_goal(
                db,
                user_id,
                title=plan.title,
                description=goal.description,
                category=plan.category,
                difficulty=plan.difficulty,
                plan=plan,
            )
        headers["X-Goal-Id"] = saved.id
        log.info(f"Saved plan for user {user_id} as goal {saved.id}")

    return JSONResponse(plan.to_wire(), headers=headers)


@router.post("/goals")
async def api_create_goal(
    req: CreateGoalRequest,
    user_id: str = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    plan = None
    if req.study_plan is not None:
        try:
            plan = validate_plan(req.study_plan)
        except PlanValidationError as e:
            raise InputError(f"Invalid studyPlan: field '{e.field}'") from e

    goal = await create_goal(
        db,
        user_id,
        title=req.title,
        description=req.description,
        category=req.category,
        difficulty=req.difficulty,
        plan=plan,
    )
    return {"success": True, "goal": goal_to_dict(goal)}


@router.get("/goals")
async def api_list_goals(user_id: str = Depends(require_user), db: AsyncSession = Depends(get_db)):
    goals = await list_goals(db, user_id)
    return {"goals": [goal_to_dict(g) for g in goals]}


@router.get("/goals/{goal_id}")
async def api_get_goal(goal_id: str, user_id: str = Depends(require_user), db: AsyncSession = Depends(get_db)):
    goal = await get_goal(db, goal_id, user_id)
    if not goal:
        raise GoalNotFoundError("goal not found")
    return {"goal": goal_to_dict(goal)}


@router.post("/goals/{goal_id}/progress")
async def api_update_progress(
    goal_id: str,
    req: UpdateProgressRequest,
    user_id: str = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    goal = await get_goal(db, goal_id, user_id)
    if not goal:
        raise GoalNotFoundError("goal not found")

    if req.lesson_id:
        found = await set_lesson_completion(db, req.lesson_id, req.completed, goal_id=goal_id)
        if not found:
            raise GoalNotFoundError("lesson not found")

    progress = await recalculate_progress(db, goal_id)
    return {"success": True, "progress": progress}
