"""
Identity resolution.

Turns an ``Authorization: Bearer <jwt>`` credential into an Actor and
guards role-restricted operations.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt
from sqlalchemy.orm import Session

from jobboard.config import Settings
from jobboard.db.enums import Role
from jobboard.db.tables import User
from jobboard.errors import Forbidden, InvalidOrExpiredToken, Unauthenticated
from jobboard.services.policy import Actor, has_role

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class TokenClaims:
    actor_id: str
    email: str
    role: Role


class TokenService:
    """Issues and verifies signed access tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256", expires_minutes: int = 60 * 24 * 7):
        self.secret = secret
        self.algorithm = algorithm
        self.expires = timedelta(minutes=expires_minutes)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(settings.jwt_secret, settings.jwt_algorithm, settings.jwt_expires_minutes)

    def issue(self, user: User) -> str:
        now = datetime.now(UTC)
        payload = {
            "sub": user.id,
            "email": user.email,
            "role": Role(user.role).value,
            "iat": now,
            "exp": now + self.expires,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "role", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidOrExpiredToken("Token expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidOrExpiredToken("Invalid token") from e

        try:
            role = Role(payload["role"])
        except ValueError as e:
            raise InvalidOrExpiredToken("Invalid token") from e

        return TokenClaims(actor_id=str(payload["sub"]), email=payload.get("email", ""), role=role)


class IdentityContext:
    """Resolves credentials against the token service and the user table."""

    def __init__(self, tokens: TokenService, db: Session):
        self.tokens = tokens
        self.db = db

    def resolve(self, credential: str | None) -> Actor:
        if not credential or not credential.startswith(BEARER_PREFIX):
            raise Unauthenticated("Access token is required")

        token = credential[len(BEARER_PREFIX):].strip()
        if not token:
            raise Unauthenticated("Access token is required")

        claims = self.tokens.verify(token)

        # Fresh lookup: deleted users and changed roles lose access
        user = self.db.get(User, claims.actor_id)
        if user is None:
            logger.info(f"Token subject {claims.actor_id} no longer exists")
            raise Unauthenticated("User not found")

        return Actor(id=user.id, role=Role(user.role))


def require_role(actor: Actor, allowed: set[Role] | frozenset[Role]) -> None:
    """Raise Forbidden unless the actor's role is in ``allowed``."""
    if not has_role(actor, allowed):
        raise Forbidden("Insufficient permissions")
