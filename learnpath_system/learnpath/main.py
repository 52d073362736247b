from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from learnpath.agent.links import LinkValidator
from learnpath.agent.planner import PlanOrchestrator
from learnpath.api.auth import TokenAuthProvider
from learnpath.api.routes import router
from learnpath.api.types import summarize_validation_error
from learnpath.core.config import Settings, settings as default_settings
from learnpath.core.errors import LearnPathError
from learnpath.core.logging import get_logger
from learnpath.db.session import init_db, make_engine, make_sessionmaker
from learnpath.llm.catalog import ModelCatalog, ModelCatalogCache
from learnpath.llm.gemini import GeminiClient
from learnpath.llm.router import Generator, RetryPolicy

log = get_logger("main")

CORS_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


def create_app(
    settings: Settings | None = None,
    *,
    gemini: GeminiClient | None = None,
    generator: Generator | None = None,
    links: LinkValidator | None = None,
    catalog_cache: ModelCatalogCache | None = None,
    retry: RetryPolicy | None = None,
) -> FastAPI:
    """
    Wire the app. Every collaborator can be injected (tests pass fakes);
    anything not injected is built from settings and closed on shutdown.
    """
    settings = settings or default_settings
    owned = []

    if gemini is None:
        gemini = GeminiClient(settings)
        owned.append(gemini)
    if links is None:
        links = LinkValidator(settings)
        owned.append(links)
    cache = catalog_cache or ModelCatalogCache(settings.MODEL_CACHE_TTL_SECONDS)
    engine = make_engine(settings.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_db(engine)
        yield
        for client in owned:
            await client.close()
        await engine.dispose()

    app = FastAPI(title="LearnPath Study Plan API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_methods=["*"],
        allow_headers=CORS_HEADERS,
        expose_headers=["X-Plan-Source", "X-Goal-Id"],
    )

    app.state.settings = settings
    app.state.auth = TokenAuthProvider(settings.AUTH_TOKENS)
    app.state.engine = engine
    app.state.sessionmaker = make_sessionmaker(engine)
    app.state.catalog_cache = cache
    app.state.orchestrator = PlanOrchestrator(
        catalog=ModelCatalog(gemini, cache, settings.MODEL_PREFERENCES),
        generator=generator or gemini,
        links=links,
        retry=retry or RetryPolicy.from_settings(settings),
        link_budget_seconds=settings.LINK_STEP_BUDGET_SECONDS,
        fallback_enabled=settings.FALLBACK_ENABLED,
    )

    @app.exception_handler(LearnPathError)
    async def on_learnpath_error(request: Request, exc: LearnPathError):
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def on_bad_request(request: Request, exc: RequestValidationError):
        return JSONResponse({"error": summarize_validation_error(exc.errors())}, status_code=400)

    @app.exception_handler(Exception)
    async def on_crash(request: Request, exc: Exception):
        log.exception(f"Unhandled error on {request.method} {request.url.path}")
        # served by ServerErrorMiddleware, outside CORSMiddleware
        headers = {}
        origin = request.headers.get("origin")
        if "*" in settings.CORS_ALLOW_ORIGINS:
            headers["Access-Control-Allow-Origin"] = "*"
        elif origin in settings.CORS_ALLOW_ORIGINS:
            headers["Access-Control-Allow-Origin"] = origin
            headers["Vary"] = "Origin"
        return JSONResponse({"error": "Internal server error"}, status_code=500, headers=headers)

    app.include_router(router, prefix="/v1")
    return app


app = create_app()
