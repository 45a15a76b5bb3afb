"""User registration, login and profile updates."""

import logging
from datetime import UTC, datetime
from typing import Any

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobboard.db.enums import Role
from jobboard.db.tables import User
from jobboard.errors import Conflict, NotFound, Unauthenticated

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("first_name", "last_name", "phone", "bio", "skills", "experience", "education")


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=12)).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


class AccountService:
    def __init__(self, db: Session):
        self.db = db

    def register(
        self,
        *,
        email: str,
        password: str,
        role: Role,
        first_name: str,
        last_name: str,
        phone: str | None = None,
        bio: str | None = None,
    ) -> User:
        email = email.strip().lower()
        if self._find_by_email(email):
            raise Conflict("User already exists with this email")

        user = User(
            email=email,
            password_hash=hash_password(password),
            role=role,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            bio=bio,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration
            self.db.rollback()
            raise Conflict("User already exists with this email") from e
        self.db.refresh(user)

        logger.info(f"Registered {user.role.value} {user.id}")
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self._find_by_email(email.strip().lower())
        if user is None or not check_password(password, user.password_hash):
            raise Unauthenticated("Invalid credentials")
        return user

    def get(self, user_id: str) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def update_profile(self, user_id: str, changes: dict[str, Any]) -> User:
        user = self.get(user_id)
        for field, value in changes.items():
            if field in PROFILE_FIELDS:
                setattr(user, field, value)
        user.updated_at = datetime.now(UTC)
        self.db.commit()
        self.db.refresh(user)
        return user

    def _find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email).first()
