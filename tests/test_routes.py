import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from learnpath.core.errors import TransientUpstreamError, UpstreamError
from tests.fakes import AUTH, FakeGemini, fenced, model, plan_dict

GENERATE = "/v1/study-plans/generate"


@pytest.mark.asyncio
async def test_generate_returns_plan(client):
    res = await client.post(GENERATE, json={"goalTitle": "Learn Python"}, headers=AUTH)
    assert res.status_code == 200
    body = res.json()
    assert body["title"] == "Python Basics"
    assert body["steps"][0]["durationMinutes"] == 30
    assert body["steps"][0]["resources"][0]["type"] == "article"
    assert res.headers["X-Plan-Source"] == "generated"


@pytest.mark.asyncio
async def test_missing_auth_is_401_and_pipeline_not_called(client):
    res = await client.post(GENERATE, json={"goalTitle": "Learn Python"})
    assert res.status_code == 401
    assert res.json() == {"error": "Missing authorization header"}
    assert client.fake_gemini.calls == []
    assert client.fake_gemini.list_calls == 0


@pytest.mark.asyncio
async def test_unknown_token_is_401(client):
    res = await client.post(GENERATE, json={"goalTitle": "x"}, headers={"Authorization": "Bearer nope"})
    assert res.status_code == 401
    res = await client.post(GENERATE, json={"goalTitle": "x"}, headers={"Authorization": "Basic abc"})
    assert res.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {},
        {"goalTitle": ""},
        {"goalTitle": "   "},
        {"goalTitle": 42},
        {"goalTitle": "ok", "goalDescription": 7},
        ["goalTitle"],
    ],
)
async def test_bad_goal_is_400(client, body):
    res = await client.post(GENERATE, json=body, headers=AUTH)
    assert res.status_code == 400
    assert "error" in res.json()
    assert client.fake_gemini.calls == []


@pytest.mark.asyncio
async def test_non_json_body_is_400(client):
    res = await client.post(GENERATE, content=b"goal=python", headers={**AUTH, "Content-Type": "text/plain"})
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_fallback_is_success(app_factory):
    app, gemini, _ = app_factory(fake_gemini=FakeGemini(responses=[TransientUpstreamError("overloaded", 503)]))
    async with LifespanManager(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            res = await c.post(GENERATE, json={"goalTitle": "Learn Rust"}, headers=AUTH)
    assert res.status_code == 200
    assert res.headers["X-Plan-Source"] == "fallback"
    assert len(res.json()["steps"]) == 5
    assert len(gemini.calls) == 5


@pytest.mark.asyncio
async def test_quota_passthrough_when_fallback_disabled(app_factory):
    app, _, _ = app_factory(
        fake_gemini=FakeGemini(responses=[UpstreamError("Quota exceeded", 402)]),
        FALLBACK_ENABLED=False,
    )
    async with LifespanManager(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            res = await c.post(GENERATE, json={"goalTitle": "Learn Rust"}, headers=AUTH)
    assert res.status_code == 402
    assert res.json() == {"error": "Quota exceeded"}


@pytest.mark.asyncio
async def test_discovery_failure_is_502(app_factory):
    app, gemini, _ = app_factory(fake_gemini=FakeGemini(models=[model("models/embed", "embedContent")]))
    async with LifespanManager(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            res = await c.post(GENERATE, json={"goalTitle": "Learn Rust"}, headers=AUTH)
    assert res.status_code == 502
    assert gemini.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["no json at all", fenced({"title": "T", "summary": "S"})])
async def test_bad_model_output_is_500(app_factory, text):
    app, _, _ = app_factory(fake_gemini=FakeGemini(responses=[text]))
    async with LifespanManager(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            res = await c.post(GENERATE, json={"goalTitle": "Learn Rust"}, headers=AUTH)
    assert res.status_code == 500
    assert set(res.json()) == {"error"}


@pytest.mark.asyncio
async def test_preflight_and_cors_headers(client):
    res = await client.options(GENERATE)
    assert res.status_code == 200
    assert res.content == b""

    res = await client.options(
        GENERATE,
        headers={"Origin": "https://app.example.com", "Access-Control-Request-Method": "POST"},
    )
    assert res.status_code == 200
    assert res.headers["access-control-allow-origin"] == "*"

    res = await client.post(
        GENERATE, json={"goalTitle": "Learn Python"}, headers={**AUTH, "Origin": "https://app.example.com"}
    )
    assert res.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
async def test_generate_and_save_then_track_progress(client):
    res = await client.post(
        GENERATE + "?save=true",
        json={"goalTitle": "Learn Python", "goalDescription": "for data work"},
        headers=AUTH,
    )
    assert res.status_code == 200
    goal_id = res.headers["X-Goal-Id"]

    res = await client.get(f"/v1/goals/{goal_id}", headers=AUTH)
    assert res.status_code == 200
    goal = res.json()["goal"]
    assert goal["title"] == "Python Basics"
    assert goal["description"] == "for data work"
    lesson_id = goal["lessons"][0]["id"]

    res = await client.post(
        f"/v1/goals/{goal_id}/progress", json={"lessonId": lesson_id, "completed": True}, headers=AUTH
    )
    assert res.json() == {"success": True, "progress": 100}

    # another user cannot see it
    res = await client.get(f"/v1/goals/{goal_id}", headers={"Authorization": "Bearer other-token"})
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_create_and_list_goals(client):
    res = await client.post(
        "/v1/goals",
        json={"title": "Learn SQL", "category": "Data", "difficulty": 2, "studyPlan": plan_dict(steps=3)},
        headers=AUTH,
    )
    assert res.status_code == 200
    created = res.json()["goal"]
    assert [l["orderIndex"] for l in created["lessons"]] == [0, 1, 2]
    assert created["progress"] == 0

    res = await client.get("/v1/goals", headers=AUTH)
    assert [g["id"] for g in res.json()["goals"]] == [created["id"]]


@pytest.mark.asyncio
async def test_create_goal_rejects_bad_input(client):
    res = await client.post("/v1/goals", json={"title": "X", "difficulty": 9}, headers=AUTH)
    assert res.status_code == 400

    bad_plan = plan_dict()
    del bad_plan["steps"]
    res = await client.post("/v1/goals", json={"title": "X", "studyPlan": bad_plan}, headers=AUTH)
    assert res.status_code == 400
    assert "steps" in res.json()["error"]


@pytest.mark.asyncio
async def test_unexpected_crash_is_500_with_cors_header(app_factory):
    app, _, _ = app_factory(fake_gemini=FakeGemini(responses=[RuntimeError("boom")]))
    async with LifespanManager(app):
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            res = await c.post(
                GENERATE, json={"goalTitle": "Learn Rust"}, headers={**AUTH, "Origin": "https://app.example.com"}
            )
    assert res.status_code == 500
    assert res.json() == {"error": "Internal server error"}
    assert res.headers["access-control-allow-origin"] == "*"
