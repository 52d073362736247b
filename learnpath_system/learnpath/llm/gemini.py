"""
Gemini REST client and it does:
- Lists the model catalog (following page tokens)
- Sends one generateContent call
- Turns non-2xx answers into UpstreamError with a summarized message

Main purpose:
The only place that talks to the generative backend. Retries live in
llm.router; this client makes exactly one attempt per call.
"""


import httpx

from learnpath.core.config import Settings
from learnpath.core.errors import ConfigurationError, ExtractionError, TransientUpstreamError, UpstreamError
from learnpath.core.logging import get_logger, snippet
from learnpath.llm.schemas import ModelDescriptor

log = get_logger("llm.gemini")

SUMMARY_CHARS = 200


def _summarize_error(r: httpx.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        body = None
    msg = ""
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict):
            msg = str(err.get("message") or "")
        elif isinstance(err, str):
            msg = err
        msg = msg or str(body.get("message") or "")
    msg = " ".join(msg.split())[:SUMMARY_CHARS]
    return msg or f"Gemini API error ({r.status_code})"


def is_retryable(status: int | None, message: str) -> bool:
    if status is None:
        return True  # transport failure / timeout
    return status == 429 or status >= 500 or "overloaded" in (message or "").lower()


class GeminiClient:
    def __init__(self, settings: Settings, http: httpx.AsyncClient | None = None):
        self.settings = settings
        self.base_url = settings.GEMINI_BASE_URL.rstrip("/")
        self.http = http or httpx.AsyncClient(timeout=httpx.Timeout(settings.GENERATION_TIMEOUT_SECONDS, connect=10.0))

    async def close(self) -> None:
        await self.http.aclose()

    def _headers(self) -> dict[str, str]:
        if not self.settings.GEMINI_API_KEY:
            raise ConfigurationError("GEMINI_API_KEY is not configured")
        # header, not ?key=, so the secret never shows up in logged URLs
        return {"x-goog-api-key": self.settings.GEMINI_API_KEY}

    async def list_models(self) -> list[ModelDescriptor]:
        headers = self._headers()
        models: list[ModelDescriptor] = []
        params: dict[str, str] = {}
        for _ in range(max(1, self.settings.MODEL_CATALOG_MAX_PAGES)):
            r = await self.http.get(f"{self.base_url}/models", headers=headers, params=params, timeout=15.0)
            if r.status_code >= 400:
                raise UpstreamError(_summarize_error(r), upstream_status=r.status_code)
            data = r.json()
            for m in data.get("models") or []:
                name = m.get("name")
                if not name:
                    continue
                models.append(
                    ModelDescriptor(
                        name=name,
                        capabilities=frozenset(m.get("supportedGenerationMethods") or []),
                    )
                )
            token = data.get("nextPageToken")
            if not token:
                break
            params = {"pageToken": token}
        return models

    async def generate(self, model: str, system: str, user: str) -> str:
        """One generateContent attempt. Returns the candidate text."""
        headers = self._headers()
        name = model if model.startswith("models/") else f"models/{model}"
        url = f"{self.base_url}/{name}:generateContent"
        payload = {
            "systemInstruction": {"parts": [{"text": system}]},
            "contents": [{"role": "user", "parts": [{"text": user}]}],
            "generationConfig": {
                "temperature": self.settings.GENERATION_TEMPERATURE,
                "topK": 40,
                "topP": 0.95,
                "maxOutputTokens": self.settings.GENERATION_MAX_OUTPUT_TOKENS,
            },
        }

        try:
            r = await self.http.post(url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise TransientUpstreamError(f"Gemini request failed: {type(e).__name__}") from e

        if r.status_code >= 400:
            msg = _summarize_error(r)
            log.warning(f"Gemini {r.status_code} for {name}: {snippet(msg)}")
            if is_retryable(r.status_code, msg):
                raise TransientUpstreamError(msg, upstream_status=r.status_code)
            raise UpstreamError(msg, upstream_status=r.status_code)

        try:
            data = r.json()
        except ValueError as e:
            raise ExtractionError("Invalid response from AI service", preview=r.text[:200]) from e
        return self._candidate_text(data)

    @staticmethod
    def _candidate_text(data: dict) -> str:
        candidates = data.get("candidates") or []
        parts = []
        if candidates:
            parts = ((candidates[0] or {}).get("content") or {}).get("parts") or []
        text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
        if not text.strip():
            reason = (data.get("promptFeedback") or {}).get("blockReason")
            if not reason and candidates:
                reason = (candidates[0] or {}).get("finishReason")
            detail = f" ({reason})" if reason else ""
            raise ExtractionError(f"Invalid response from AI service{detail}")
        return text
