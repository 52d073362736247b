"""
Error taxonomy shared by the pipeline and the HTTP layer.

Every error carries the status code and a client-safe message; the API
layer renders them as {"error": message}.
"""


class LearnPathError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(LearnPathError):
    status_code = 401


class InputError(LearnPathError):
    status_code = 400


class ConfigurationError(LearnPathError):
    status_code = 500


class DiscoveryError(LearnPathError):
    """No usable generative model (or the catalog could not be read)."""

    status_code = 502


class UpstreamError(LearnPathError):
    """A generation call failed. `upstream_status` is None for transport errors."""

    # statuses passed through to the caller as-is; everything else is a 502
    PASSTHROUGH = (400, 401, 402, 429)

    def __init__(self, message: str, upstream_status: int | None = None):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.status_code = upstream_status if upstream_status in self.PASSTHROUGH else 502


class TransientUpstreamError(UpstreamError):
    pass


class ExtractionError(LearnPathError):
    status_code = 500

    def __init__(self, message: str, preview: str = ""):
        super().__init__(message)
        self.preview = preview


class PlanValidationError(LearnPathError):
    status_code = 500

    def __init__(self, field: str, problem: str):
        super().__init__(f"Generated plan has invalid field '{field}': {problem}")
        self.field = field


class GoalNotFoundError(LearnPathError):
    status_code = 404
