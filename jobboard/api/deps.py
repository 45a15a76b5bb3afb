"""FastAPI dependencies: sessions, services and the current actor."""

from collections.abc import Generator

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from jobboard.config import Settings
from jobboard.db.enums import Role
from jobboard.services.accounts import AccountService
from jobboard.services.applications import ApplicationWorkflow
from jobboard.services.identity import IdentityContext, TokenService, require_role
from jobboard.services.jobs import JobCatalog
from jobboard.services.policy import Actor


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Generator[Session, None, None]:
    """Per-request session from the app's Database."""
    yield from request.app.state.database.sessions()


def get_tokens(request: Request) -> TokenService:
    return request.app.state.tokens


def get_current_actor(
    authorization: str | None = Header(None),
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_tokens),
) -> Actor:
    return IdentityContext(tokens, db).resolve(authorization)


def require_employer(actor: Actor = Depends(get_current_actor)) -> Actor:
    require_role(actor, {Role.EMPLOYER})
    return actor


def require_candidate(actor: Actor = Depends(get_current_actor)) -> Actor:
    require_role(actor, {Role.CANDIDATE})
    return actor


def get_accounts(db: Session = Depends(get_db)) -> AccountService:
    return AccountService(db)


def get_catalog(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)) -> JobCatalog:
    return JobCatalog(db, max_page_size=settings.max_page_size)


def get_workflow(request: Request, db: Session = Depends(get_db)) -> ApplicationWorkflow:
    return ApplicationWorkflow(db, dispatcher=request.app.state.dispatcher)
