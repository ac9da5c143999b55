import httpx
from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import OAuth2PasswordBearer

from loan_console.clients.lending_api import LendingAPIClient
from loan_console.core.context import set_admin
from loan_console.core.security import decode_token
from loan_console.core.settings import settings
from loan_console.schemas.common import ListQuery
from loan_console.services.sessions import AdminSession, SessionExpired, SessionStore
from loan_console.services.storage.service import UploadService, get_storage_adapter
from loan_console.utils.redis_client import get_redis_client

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def get_http_client(request: Request) -> httpx.AsyncClient:
    http = getattr(request.app.state, "http_client", None)
    if http is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Lending API client not initialised",
        )
    return http


def get_session_store() -> SessionStore:
    return SessionStore(get_redis_client())


def get_public_lending_client(
    http: httpx.AsyncClient = Depends(get_http_client),
) -> LendingAPIClient:
    return LendingAPIClient(http)


async def get_current_session(
    token: str = Depends(oauth2_scheme),
    store: SessionStore = Depends(get_session_store),
) -> AdminSession:
    try:
        payload = decode_token(token)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc

    session = await store.get(payload["sid"])
    if session is None or session.username != payload["sub"]:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session revoked")

    try:
        await store.touch(session)
    except SessionExpired as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    set_admin(session.username)
    return session


async def get_lending_client(
    session: AdminSession = Depends(get_current_session),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> LendingAPIClient:
    """Upstream client carrying the signed-in admin's bearer token."""
    return LendingAPIClient(http, session.upstream_token)


def get_list_query(
    search: str | None = Query(default=None, max_length=100),
    status_filter: str | None = Query(default=None, alias="status", max_length=40),
    page: int = Query(default=0, ge=0),
    size: int | None = Query(default=None, ge=1),
) -> ListQuery:
    page_size = min(size or settings.default_page_size, settings.max_page_size)
    return ListQuery(search=search, status=status_filter, page=page, size=page_size)


def get_upload_service() -> UploadService:
    try:
        adapter = get_storage_adapter()
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return UploadService(adapter)
