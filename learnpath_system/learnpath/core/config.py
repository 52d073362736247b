"""
Application configuration loader and it handles:
- Environment variables
- Gemini credentials and model preferences
- Retry / backoff / timeout budgets
- Database and auth configuration

And, the main purpose:
Central place for system configuration.
"""


from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./learnpath.db"

    # Gemini
    GEMINI_API_KEY: str = ""
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    # substrings, lightest models first; first match in catalog order wins
    MODEL_PREFERENCES: list[str] = [
        "gemini-2.0-flash-lite",
        "gemini-2.0-flash",
        "gemini-1.5-flash",
        "gemini-pro",
    ]
    MODEL_CACHE_TTL_SECONDS: float = 300.0
    MODEL_CATALOG_MAX_PAGES: int = 5

    # Generation
    GENERATION_MAX_ATTEMPTS: int = 5
    BACKOFF_BASE_SECONDS: float = 1.0
    BACKOFF_MAX_SECONDS: float = 8.0
    BACKOFF_JITTER_SECONDS: float = 0.5
    GENERATION_BUDGET_SECONDS: float = 120.0
    GENERATION_TIMEOUT_SECONDS: float = 60.0
    GENERATION_TEMPERATURE: float = 0.7
    GENERATION_MAX_OUTPUT_TOKENS: int = 8192
    FALLBACK_ENABLED: bool = True

    # Link checks
    VIDEO_CHECK_TIMEOUT_SECONDS: float = 8.0
    LINK_PROBE_TIMEOUT_SECONDS: float = 5.0
    LINK_STEP_BUDGET_SECONDS: float = 12.0

    # Auth: bearer token -> user id. Empty means any bearer is accepted (dev).
    AUTH_TOKENS: dict[str, str] = {}
    CORS_ALLOW_ORIGINS: list[str] = ["*"]

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
