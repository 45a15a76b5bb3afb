"""Registration, login and the current user's profile."""

from fastapi import APIRouter, Depends, status

from jobboard.api.deps import get_accounts, get_current_actor, get_tokens
from jobboard.api.limiter import rate_limit
from jobboard.api.schemas import ApiResponse, AuthData, LoginRequest, RegisterRequest, UserResponse, UserUpdate
from jobboard.services.accounts import AccountService
from jobboard.services.identity import TokenService
from jobboard.services.policy import Actor

router = APIRouter()


@router.post(
    "/register",
    response_model=ApiResponse[AuthData],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("auth_rate_limit"))],
)
def register(
    data: RegisterRequest,
    accounts: AccountService = Depends(get_accounts),
    tokens: TokenService = Depends(get_tokens),
):
    """Create an employer or candidate account."""
    user = accounts.register(**data.model_dump())
    return ApiResponse(
        data=AuthData(user=UserResponse.model_validate(user), token=tokens.issue(user)),
        message="User registered successfully",
    )


@router.post("/login", response_model=ApiResponse[AuthData], dependencies=[Depends(rate_limit("auth_rate_limit"))])
def login(
    data: LoginRequest,
    accounts: AccountService = Depends(get_accounts),
    tokens: TokenService = Depends(get_tokens),
):
    """Exchange email and password for a bearer token."""
    user = accounts.authenticate(data.email, data.password)
    return ApiResponse(
        data=AuthData(user=UserResponse.model_validate(user), token=tokens.issue(user)),
        message="Login successful",
    )


@router.get("/me", response_model=ApiResponse[UserResponse])
def get_me(
    actor: Actor = Depends(get_current_actor),
    accounts: AccountService = Depends(get_accounts),
):
    """Get the current user."""
    return ApiResponse(data=UserResponse.model_validate(accounts.get(actor.id)))


@router.put("/me", response_model=ApiResponse[UserResponse])
def update_me(
    data: UserUpdate,
    actor: Actor = Depends(get_current_actor),
    accounts: AccountService = Depends(get_accounts),
):
    """Update the current user's profile fields."""
    user = accounts.update_profile(actor.id, data.model_dump(exclude_unset=True))
    return ApiResponse(data=UserResponse.model_validate(user), message="Profile updated successfully")


@router.post("/refresh", response_model=ApiResponse[AuthData])
def refresh(
    actor: Actor = Depends(get_current_actor),
    accounts: AccountService = Depends(get_accounts),
    tokens: TokenService = Depends(get_tokens),
):
    """Issue a fresh token for a still-valid one."""
    user = accounts.get(actor.id)
    return ApiResponse(
        data=AuthData(user=UserResponse.model_validate(user), token=tokens.issue(user)),
        message="Token refreshed successfully",
    )
