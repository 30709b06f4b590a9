"""Registration, login and the access control gate (get_request_context, require_roles)."""

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.api.deps import get_account_store, get_app_settings, get_token_service
from app.core.config import Settings
from app.core.context import RequestContext
from app.core.errors import NotFound, Unauthenticated
from app.core.security import (
    ADMIN_ROLES,
    EDITOR_ROLES,
    TokenService,
    authorize,
    hash_password,
    verify_password,
)
from app.schemas.auth import (
    AccountDraft,
    LoginRequest,
    RegisterData,
    RegisterRequest,
    RegisterResponse,
    TokenData,
    TokenResponse,
)
from app.services.account_store import AccountStore

logger = logging.getLogger(__name__)

router = APIRouter()
security = HTTPBearer(auto_error=False)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    accounts: Annotated[AccountStore, Depends(get_account_store)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> RegisterResponse:
    """Create an account. Roles default to ['editor']; 409 when the email is taken."""
    user_id = accounts.create(
        AccountDraft(
            email=body.email,
            password_hash=hash_password(body.password, rounds=settings.BCRYPT_ROUNDS),
            username=body.username,
            roles=body.roles or [],
        )
    )
    logger.info("Registered account id=%s", user_id)
    return RegisterResponse(data=RegisterData(user_id=user_id))


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    accounts: Annotated[AccountStore, Depends(get_account_store)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> TokenResponse:
    """
    Authenticate with email and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <accessToken>
    """
    try:
        account = accounts.find_by_email(body.email)
    except NotFound:
        raise Unauthenticated("invalid credentials") from None
    if not verify_password(body.password, account.password_hash):
        raise Unauthenticated("invalid credentials")
    token = tokens.issue(account.id, account.roles)
    return TokenResponse(data=TokenData(access_token=token))


def get_request_context(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> RequestContext:
    """Dependency: require a valid Bearer token and attach its claims to the request. 401 otherwise."""
    if credentials is None:
        raise Unauthenticated("missing bearer token")
    context = RequestContext(tokens.verify(credentials.credentials))
    request.state.context = context
    return context


def require_roles(*roles: str) -> Callable[..., RequestContext]:
    """Build a dependency that passes when the caller holds any of roles; 403 otherwise."""
    required = frozenset(roles)

    def dependency(
        context: Annotated[RequestContext, Depends(get_request_context)],
    ) -> RequestContext:
        authorize(context.claims, required)
        return context

    return dependency


require_editor = require_roles(*EDITOR_ROLES)
require_admin = require_roles(*ADMIN_ROLES)
