"""
Creates the study plan.
What it does:
- Picks a model from the (cached) catalog, once per request
- Sends the goal to the planner prompt with retry/backoff
- Extracts and validates the JSON plan
- Drops resources whose links are dead, per step and in parallel
- Falls back to a local plan when the backend is unavailable

And, the main purpose:
Convert a goal into a plan the caller can use, or a classified error.
"""


import asyncio
from typing import Optional, Protocol

from learnpath.agent.fallback import build_fallback_plan, search_resource
from learnpath.core.errors import ExtractionError, LearnPathError, UpstreamError
from learnpath.core.logging import get_logger, snippet
from learnpath.llm.catalog import ModelCatalog
from learnpath.llm.json_parse import extract_json
from learnpath.llm.plan_check import validate_plan
from learnpath.llm.prompts import PLANNER_SYSTEM, build_user_prompt
from learnpath.llm.router import Generator, RetryPolicy, generate_with_retry
from learnpath.llm.schemas import GoalRequest, Plan, PlanResult, PlanState, Resource, Step

log = get_logger("agent.planner")


class LinkChecker(Protocol):
    async def validate(self, url: str, kind: str) -> bool: ...


async def filter_step_resources(step: Step, checker: LinkChecker, budget_seconds: float) -> Step:
    """
    Check every linked resource of one step concurrently.
    Checks still running when the budget elapses are cancelled and count as dead.
    Resources without a URL are kept as they are.
    """
    tasks: dict[int, asyncio.Task] = {
        i: asyncio.create_task(checker.validate(r.url, r.kind))
        for i, r in enumerate(step.resources)
        if r.url
    }
    verdicts: dict[int, bool] = {}
    if tasks:
        try:
            done, pending = await asyncio.wait(tasks.values(), timeout=budget_seconds)
        finally:
            # also runs when the request itself is cancelled; no check outlives the step
            stragglers = [t for t in tasks.values() if not t.done()]
            for task in stragglers:
                task.cancel()
            if stragglers:
                await asyncio.gather(*stragglers, return_exceptions=True)
        if pending:
            log.info(f"Step {step.id!r}: {len(pending)} link check(s) timed out")
        for i, task in tasks.items():
            verdicts[i] = task in done and not task.cancelled() and task.exception() is None and task.result() is True

    kept: list[Resource] = []
    for i, r in enumerate(step.resources):
        if i in verdicts and not verdicts[i]:
            log.info(f"Dropping unreachable {r.kind} resource {r.url!r} from step {step.id!r}")
            continue
        kept.append(r)

    if not kept:
        kept = [search_resource(step.title)]
    return step.model_copy(update={"resources": kept})


async def filter_plan_resources(plan: Plan, checker: LinkChecker, budget_seconds: float) -> Plan:
    steps = [await filter_step_resources(s, checker, budget_seconds) for s in plan.steps]
    return plan.model_copy(update={"steps": steps})


class PlanOrchestrator:
    def __init__(
        self,
        *,
        catalog: ModelCatalog,
        generator: Generator,
        links: LinkChecker,
        retry: RetryPolicy,
        link_budget_seconds: float = 12.0,
        fallback_enabled: bool = True,
    ):
        self.catalog = catalog
        self.generator = generator
        self.links = links
        self.retry = retry
        self.link_budget_seconds = link_budget_seconds
        self.fallback_enabled = fallback_enabled

    def _enter(self, state: PlanState, goal: GoalRequest, detail: str = "") -> PlanState:
        log.info(f"[{goal.title[:60]}] -> {state.value}{(': ' + detail) if detail else ''}")
        return state

    async def generate(self, goal: GoalRequest) -> PlanResult:
        state = self._enter(PlanState.SELECTING_MODEL, goal)
        model: Optional[str] = None
        try:
            model = (await self.catalog.pick()).name

            state = self._enter(PlanState.GENERATING, goal, model)
            try:
                text = await generate_with_retry(
                    self.generator,
                    model,
                    PLANNER_SYSTEM,
                    build_user_prompt(goal.title, goal.description),
                    self.retry,
                )
            except UpstreamError as e:
                if e.upstream_status == 404:
                    # the model vanished from upstream; re-discover next time
                    self.catalog.cache.invalidate()
                if not self.fallback_enabled:
                    raise
                self._enter(PlanState.FALLBACK, goal, e.message)
                return PlanResult(plan=build_fallback_plan(goal), state=PlanState.FALLBACK, model=model)

            state = self._enter(PlanState.EXTRACTING, goal)
            candidate = extract_json(text)

            state = self._enter(PlanState.VALIDATING, goal)
            plan = validate_plan(candidate)

            state = self._enter(PlanState.FILTERING_RESOURCES, goal, f"{len(plan.steps)} steps")
            plan = await filter_plan_resources(plan, self.links, self.link_budget_seconds)

        except LearnPathError as e:
            log.warning(f"Plan generation failed in {state.value}: {type(e).__name__}: {e.message}")
            if isinstance(e, ExtractionError) and e.preview:
                log.warning(f"Model output preview: {snippet(e.preview)}")
            self._enter(PlanState.FAILED, goal)
            raise

        self._enter(PlanState.DONE, goal)
        return PlanResult(plan=plan, state=PlanState.DONE, model=model)
