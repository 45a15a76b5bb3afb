"""
Pytest configuration and shared fixtures.
"""

import itertools
from datetime import UTC, datetime

import bcrypt
import pytest
from fastapi.testclient import TestClient

from jobboard.api.app import create_app
from jobboard.config import Settings
from jobboard.db.base import Database
from jobboard.db.enums import JobStatus, Role
from jobboard.db.tables import Job, User
from jobboard.services.identity import TokenService
from jobboard.services.scoring import JobBrief, ScoreResult

TEST_SECRET = "test-secret"
TEST_PASSWORD = "correct-horse"

# Cheap hash shared by seeded users
TEST_PASSWORD_HASH = bcrypt.hashpw(TEST_PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")

_sequence = itertools.count(1)


class RecordingDispatcher:
    """Stands in for ScoringDispatcher and remembers what was scheduled."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[tuple[str, str, str | None, JobBrief]] = []

    def schedule(self, application_id, resume_text, cover_letter, job):
        if self.fail:
            raise RuntimeError("scoring queue is down")
        self.calls.append((application_id, resume_text, cover_letter, job))


class FixedProvider:
    name = "fixed"

    def __init__(self, score: int = 88):
        self.score = score
        self.calls = 0

    def evaluate(self, resume_text, cover_letter, job):
        self.calls += 1
        return ScoreResult(
            score=self.score,
            match_percentage=self.score,
            strengths=["Relevant stack"],
            concerns=[],
            explanation="Fits the role.",
            recommendation="Highly recommended for interview",
        )


class FailingProvider:
    name = "failing"

    def evaluate(self, resume_text, cover_letter, job):
        from jobboard.errors import UpstreamUnavailable

        raise UpstreamUnavailable("provider outage")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        jwt_secret=TEST_SECRET,
        deepseek_api_key="",
        rate_limit_enabled=False,
        scoring_deadline_seconds=5.0,
        scoring_workers=2,
        environment="test",
    )


@pytest.fixture
def database(settings):
    database = Database(settings.database_url)
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session_factory()
    yield session
    session.close()


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(TEST_SECRET)


@pytest.fixture
def make_user(db):
    def _make_user(role: Role, **fields) -> User:
        n = next(_sequence)
        user = User(
            email=fields.pop("email", f"user{n}@example.com"),
            password_hash=TEST_PASSWORD_HASH,
            role=role,
            first_name=fields.pop("first_name", f"First{n}"),
            last_name=fields.pop("last_name", f"Last{n}"),
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def employer(make_user) -> User:
    return make_user(Role.EMPLOYER, first_name="Erin", bio="Hiring manager at Acme")


@pytest.fixture
def other_employer(make_user) -> User:
    return make_user(Role.EMPLOYER)


@pytest.fixture
def candidate(make_user) -> User:
    return make_user(Role.CANDIDATE, first_name="Casey", skills=["python", "django"])


@pytest.fixture
def other_candidate(make_user) -> User:
    return make_user(Role.CANDIDATE)


@pytest.fixture
def make_job(db):
    def _make_job(owner: User, **fields) -> Job:
        n = next(_sequence)
        job = Job(
            title=fields.pop("title", f"Backend Engineer {n}"),
            description=fields.pop("description", "Build and run APIs."),
            requirements=fields.pop("requirements", "python, postgresql, docker"),
            location=fields.pop("location", "Berlin, Germany"),
            owner_id=owner.id,
            status=fields.pop("status", JobStatus.ACTIVE),
            **fields,
        )
        db.add(job)
        db.commit()
        db.refresh(job)
        return job

    return _make_job


@pytest.fixture
def job(make_job, employer) -> Job:
    return make_job(
        employer,
        title="Senior Python Engineer",
        requirements="python, django, postgresql, kubernetes",
    )


def at(minute: int) -> datetime:
    """Distinct, ordered timestamps for sort tests."""
    return datetime(2026, 1, 1, 12, minute, tzinfo=UTC)


def bearer(tokens: TokenService, user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {tokens.issue(user)}"}


@pytest.fixture
def client(settings, database):
    app = create_app(settings, database=database)
    with TestClient(app) as test_client:
        yield test_client
