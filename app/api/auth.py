import hmac

from fastapi import Header, Request

from app.api.exceptions import UnauthorizedError
from app.config.settings import Settings


def require_bearer_token(
    request: Request,
    authorization: str | None = Header(default=None),
) -> None:
    """Reject the request unless it carries ``Authorization: Bearer <shared secret>``.

    An empty configured secret rejects every request.
    """
    settings: Settings = request.app.state.settings
    secret = settings.shared_secret
    if not secret or authorization is None:
        raise UnauthorizedError()
    expected = f"Bearer {secret}".encode()
    if not hmac.compare_digest(authorization.encode(), expected):
        raise UnauthorizedError()
