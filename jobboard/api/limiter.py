"""Rate limiting.

Each app owns its slowapi ``Limiter`` (built from its Settings and kept on
``app.state``); routes opt in with ``Depends(rate_limit("<setting name>"))``.
"""

from fastapi import Request
from limits import parse
from slowapi import Limiter
from slowapi.util import get_remote_address

from jobboard.config import Settings
from jobboard.errors import RateLimited


def build_limiter(settings: Settings) -> Limiter:
    return Limiter(
        key_func=get_remote_address,
        storage_uri=settings.rate_limit_storage_uri,
        enabled=settings.rate_limit_enabled,
    )


def rate_limit(setting: str):
    """Dependency enforcing the limit named by ``setting`` (e.g. ``"auth_rate_limit"``)."""

    def check(request: Request) -> None:
        limiter: Limiter = request.app.state.limiter
        if not limiter.enabled:
            return
        limit = getattr(request.app.state.settings, setting)
        # Scope per route so register and login don't share a bucket
        if not limiter.limiter.hit(parse(limit), request.url.path, get_remote_address(request)):
            raise RateLimited(f"Rate limit exceeded: {limit}")

    return check
