"""
Bearer-token authentication.
What it does:
- Reads the Authorization header
- Maps a known token to its user id (AUTH_TOKENS)
- With no tokens configured, accepts any bearer and derives a stable user id

And, the main purpose:
Keep unauthenticated callers away from the generation pipeline.
"""


from fastapi import Header, Request

from learnpath.core.errors import AuthError
from learnpath.core.ids import stable_id


class TokenAuthProvider:
    def __init__(self, tokens: dict[str, str] | None = None):
        self.tokens = dict(tokens or {})

    def authenticate(self, authorization: str | None) -> str:
        if not authorization or not authorization.strip():
            raise AuthError("Missing authorization header")
        scheme, _, token = authorization.strip().partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            raise AuthError("Unauthorized")
        if not self.tokens:
            return stable_id("user", token)
        user_id = self.tokens.get(token)
        if not user_id:
            raise AuthError("Unauthorized")
        return user_id


async def require_user(request: Request, authorization: str | None = Header(None)) -> str:
    return request.app.state.auth.authenticate(authorization)
