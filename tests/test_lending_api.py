import json

import httpx
import pytest

from loan_console.clients.lending_api import LendingAPIClient, LendingAPIError


def _client(handler, token: str | None = "tok") -> LendingAPIClient:
    http = httpx.AsyncClient(
        base_url="https://lending.test/api/", transport=httpx.MockTransport(handler)
    )
    return LendingAPIClient(http, token)


@pytest.mark.asyncio
async def test_unwraps_data_and_sends_bearer_token() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"data": {"content": [], "totalElements": 0}, "message": "ok"})

    client = _client(handler)
    result = await client.filter_applications({"page": 0, "size": 10})

    assert result == {"content": [], "totalElements": 0}
    assert seen["url"] == "https://lending.test/api/loan-application/filter"
    assert seen["auth"] == "Bearer tok"
    assert seen["body"] == {"page": 0, "size": 10}


@pytest.mark.asyncio
async def test_login_is_sent_without_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert "authorization" not in request.headers
        return httpx.Response(200, json={"data": {"token": "abc"}})

    assert await _client(handler, token=None).admin_login("admin", "pw") == {"token": "abc"}


@pytest.mark.asyncio
async def test_error_message_comes_from_upstream_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"message": "Loan application already decided"})

    with pytest.raises(LendingAPIError) as exc:
        await _client(handler).update_application_status("app-1", {"status": "APPROVED"})
    assert exc.value.status_code == 400
    assert exc.value.message == "Loan application already decided"


@pytest.mark.asyncio
async def test_error_without_message_uses_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    with pytest.raises(LendingAPIError) as exc:
        await _client(handler).get_repayment("rp-1")
    assert exc.value.message == "HTTP error! status: 500"


@pytest.mark.asyncio
async def test_transport_failure_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(LendingAPIError) as exc:
        await _client(handler).get_borrower_profile("b-1")
    assert exc.value.status_code is None
    assert exc.value.message == "Could not reach the lending service."


@pytest.mark.asyncio
async def test_loan_history_defaults_to_empty_list() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/loan-application/b-1/loan-history"
        return httpx.Response(200, json={"data": None})

    assert await _client(handler).get_loan_history("b-1") == []
