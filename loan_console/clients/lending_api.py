"""Async client for the upstream lending REST API.

Every console view is a thin layer over one or more calls made through
``LendingAPIClient``. Upstream responses wrap their payload as
``{"data": ..., "message": ...}``; the client unwraps ``data`` and turns any
failure into ``LendingAPIError`` carrying the upstream message.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from loan_console.core.settings import settings

logger = logging.getLogger(__name__)


class LendingAPIError(Exception):
    def __init__(self, status_code: int | None, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload

    def __repr__(self) -> str:
        return f"LendingAPIError(status_code={self.status_code!r}, message={self.message!r})"


def _error_message(response: httpx.Response) -> tuple[str, Any]:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if message:
            return str(message), body
    return f"HTTP error! status: {response.status_code}", body


def create_http_client(transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=settings.resolved_lending_api_base_url,
        timeout=settings.lending_api_timeout_seconds,
        headers={"accept": "application/json"},
        transport=transport,
    )


class LendingAPIClient:
    def __init__(self, http: httpx.AsyncClient, token: str | None = None) -> None:
        self.http = http
        self.token = token

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        started = time.perf_counter()
        try:
            response = await self.http.request(
                method, path.lstrip("/"), json=json, params=params, headers=headers
            )
        except httpx.TimeoutException as exc:
            logger.warning("Lending API timeout %s %s", method, path)
            raise LendingAPIError(None, "The lending service did not respond in time.") from exc
        except httpx.HTTPError as exc:
            logger.warning("Lending API transport error %s %s: %s", method, path, exc)
            raise LendingAPIError(None, "Could not reach the lending service.") from exc

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "Lending API %s %s -> %s in %sms", method, path, response.status_code, elapsed_ms
        )
        if response.is_error:
            message, body = _error_message(response)
            raise LendingAPIError(response.status_code, message, body)

        if not response.content:
            return None
        try:
            body = response.json()
        except ValueError as exc:
            raise LendingAPIError(
                response.status_code, "The lending service returned an unreadable response."
            ) from exc
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    # -- auth --

    async def admin_login(self, username: str, password: str) -> dict[str, Any]:
        return await self._request(
            "POST", "auth/admin-login", json={"username": username, "password": password}
        )

    # -- loan applications --

    async def filter_applications(self, criteria: dict[str, Any]) -> Any:
        return await self._request("POST", "loan-application/filter", json=criteria)

    async def get_application(self, application_id: str) -> dict[str, Any]:
        return await self._request("GET", f"loan-application/{application_id}/details")

    async def create_application(self, payload: dict[str, Any]) -> Any:
        return await self._request("POST", "loan-application/create", json=payload)

    async def update_application_status(
        self, application_id: str, payload: dict[str, Any]
    ) -> Any:
        return await self._request("PUT", f"loan-application/{application_id}/status", json=payload)

    async def update_processing_stage(
        self, application_id: str, payload: dict[str, Any]
    ) -> Any:
        return await self._request(
            "PUT", f"loan-application/{application_id}/processing-stage", json=payload
        )

    async def get_loan_history(self, borrower_id: str) -> list[dict[str, Any]]:
        return await self._request("GET", f"loan-application/{borrower_id}/loan-history") or []

    # -- borrowers --

    async def filter_borrowers(self, criteria: dict[str, Any]) -> Any:
        return await self._request("POST", "borrower/filter", json=criteria)

    async def get_borrower_profile(self, borrower_id: str) -> dict[str, Any]:
        return await self._request("GET", f"borrower/{borrower_id}/profile")

    async def create_borrower(self, payload: dict[str, Any]) -> Any:
        return await self._request("POST", "borrower/create", json=payload)

    async def verify_kyc_document(self, borrower_id: str, payload: dict[str, Any]) -> Any:
        return await self._request("PUT", f"borrower/{borrower_id}/kyc-document/verify", json=payload)

    async def update_borrower_status(self, borrower_id: str, payload: dict[str, Any]) -> Any:
        return await self._request("PUT", f"borrower/{borrower_id}/status", json=payload)

    # -- repayments --

    async def filter_repayments(self, criteria: dict[str, Any]) -> Any:
        return await self._request("POST", "repayment/filter", json=criteria)

    async def get_repayment(self, repayment_id: str) -> dict[str, Any]:
        return await self._request("GET", f"repayment/{repayment_id}/details")

    async def admin_collect(self, payload: dict[str, Any]) -> Any:
        return await self._request("POST", "repayment/admin-collect", json=payload)

    async def waive_late_fee(self, repayment_id: str, payload: dict[str, Any]) -> Any:
        return await self._request("PUT", f"repayment/{repayment_id}/waive-late-fee", json=payload)

    # -- health --

    async def ping(self) -> None:
        await self._request("GET", "health")
