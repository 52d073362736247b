from pathlib import Path

import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from learnpath.core.config import Settings
from learnpath.llm.router import RetryPolicy
from learnpath.main import create_app
from tests.fakes import FakeGemini, FakeLinks, no_sleep


def make_settings(tmp_path: Path, **overrides) -> Settings:
    base = dict(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        GEMINI_API_KEY="test-key",
        GEMINI_BASE_URL="https://gemini.test/v1beta",
        AUTH_TOKENS={"good-token": "user-1", "other-token": "user-2"},
        BACKOFF_BASE_SECONDS=0.0,
        BACKOFF_JITTER_SECONDS=0.0,
    )
    base.update(overrides)
    return Settings(_env_file=None, **base)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def app_factory(tmp_path: Path):
    def _factory(*, fake_gemini: FakeGemini | None = None, fake_links: FakeLinks | None = None, **overrides):
        s = make_settings(tmp_path, **overrides)
        gemini = fake_gemini or FakeGemini()
        links = fake_links or FakeLinks()
        retry = RetryPolicy.from_settings(s)
        retry.sleep = no_sleep
        app = create_app(s, gemini=gemini, links=links, retry=retry)
        return app, gemini, links

    return _factory


@pytest.fixture
async def client(app_factory):
    app, gemini, links = app_factory()
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as http_client:
            http_client.app = app  # type: ignore[attr-defined]
            http_client.fake_gemini = gemini  # type: ignore[attr-defined]
            http_client.fake_links = links  # type: ignore[attr-defined]
            yield http_client
