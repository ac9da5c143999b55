import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from loan_console.api import deps
from loan_console.clients.lending_api import LendingAPIClient, LendingAPIError
from loan_console.core.context import set_admin
from loan_console.core.limiter import limiter, login_rate_limit
from loan_console.core.response_envelope import envelope
from loan_console.core.security import create_access_token
from loan_console.schemas.auth import LOGIN_FORM_ERROR, AdminOut, LoginRequest, LoginResponse
from loan_console.schemas.forms import parse_form
from loan_console.services.audit import record_admin_action
from loan_console.services.sessions import AdminSession, SessionStore
from loan_console.utils.login_security import check_lockout, register_login_attempt

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _upstream_token(result: Any) -> str | None:
    if isinstance(result, dict):
        return result.get("token") or result.get("accessToken") or result.get("access_token")
    if isinstance(result, str):
        return result
    return None


@router.post("/login")
@limiter.limit(login_rate_limit)
async def login(
    request: Request,
    payload: dict[str, Any] | None = Body(default=None),
    client: LendingAPIClient = Depends(deps.get_public_lending_client),
    store: SessionStore = Depends(deps.get_session_store),
) -> dict:
    credentials = parse_form(LoginRequest, payload, LOGIN_FORM_ERROR)
    await check_lockout(credentials.username)
    try:
        result = await client.admin_login(credentials.username, credentials.password)
    except LendingAPIError as exc:
        if exc.status_code in (400, 401, 403):
            await register_login_attempt(credentials.username, success=False)
        raise

    token = _upstream_token(result)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": "upstream_error", "message": "The lending service did not return a session token."},
        )
    await register_login_attempt(credentials.username, success=True)

    session = await store.create(credentials.username, token)
    access_token, expires_at = create_access_token(session.username, session.session_id)
    set_admin(session.username)
    record_admin_action(action="admin.login", resource_type="session", resource_id=session.session_id)
    response = LoginResponse(
        access_token=access_token, expires_at=expires_at, username=session.username
    )
    return envelope(response.model_dump(by_alias=True, mode="json"), "Logged in successfully")


@router.post("/logout")
async def logout(
    session: AdminSession = Depends(deps.get_current_session),
    store: SessionStore = Depends(deps.get_session_store),
) -> dict:
    await store.revoke(session.session_id)
    record_admin_action(action="admin.logout", resource_type="session", resource_id=session.session_id)
    return envelope(None, "Logged out")


@router.get("/me", response_model=AdminOut)
async def me(session: AdminSession = Depends(deps.get_current_session)) -> AdminOut:
    return AdminOut(
        username=session.username,
        logged_in_at=session.created_at,
        last_active_at=session.last_active_at,
    )
