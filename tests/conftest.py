"""Global test fixtures and shared test infrastructure.

Provides:
- Environment variable defaults (must be set before any app import)
- FakeRedis implementing the redis.asyncio calls the console makes
- FakeLendingClient standing in for the upstream lending API
- Payload factories for applications, borrowers and repayments
- Shared pytest fixtures for dependency overrides and the TestClient
"""

from __future__ import annotations

import os

# Environment defaults must be set before importing the app, which triggers
# pydantic Settings validation on import.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key-boot")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
os.environ.setdefault("RATE_LIMIT_STORAGE_URI", "memory://")
os.environ.setdefault("LENDING_API_BASE_URL", "https://lending.test/api/")

from datetime import datetime, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient
from slowapi import Limiter
from slowapi.util import get_remote_address

from loan_console.api import deps
from loan_console.clients.lending_api import LendingAPIError
from loan_console.main import app
from loan_console.services.sessions import AdminSession, SessionStore


# ---------------------------------------------------------------------------
# FakeRedis: mimics the subset of redis.asyncio.Redis in use
# ---------------------------------------------------------------------------


class FakeRedis:
    def __init__(self) -> None:
        self.values: dict[str, Any] = {}
        self.hashes: dict[str, dict[str, str]] = {}
        self.ttls: dict[str, int] = {}

    async def hset(self, key: str, field: str | None = None, value: Any = None, mapping=None):
        bucket = self.hashes.setdefault(key, {})
        if mapping:
            bucket.update({k: str(v) for k, v in mapping.items()})
        if field is not None:
            bucket[field] = str(value)
        return 1

    async def hgetall(self, key: str) -> dict[str, str]:
        return dict(self.hashes.get(key, {}))

    async def expire(self, key: str, seconds: int) -> bool:
        self.ttls[key] = seconds
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            removed += int(self.values.pop(key, None) is not None)
            removed += int(self.hashes.pop(key, None) is not None)
        return removed

    async def get(self, key: str):
        return self.values.get(key)

    async def incr(self, key: str) -> int:
        self.values[key] = int(self.values.get(key, 0)) + 1
        return self.values[key]

    async def setex(self, key: str, seconds: int, value: Any) -> bool:
        self.values[key] = value
        self.ttls[key] = seconds
        return True

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        return None


# ---------------------------------------------------------------------------
# FakeLendingClient: stands in for LendingAPIClient
# ---------------------------------------------------------------------------


class FakeLendingClient:
    """Records upstream calls and answers from ``responses``.

    A response may be a value, an exception instance (raised), or a callable
    taking the call arguments.
    """

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses: dict[str, Any] = dict(responses or {})
        self.calls: list[tuple[str, tuple]] = []
        self.token = "upstream-token"

    async def _respond(self, name: str, *args: Any) -> Any:
        self.calls.append((name, args))
        response = self.responses.get(name)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(*args)
        return response

    def called(self, name: str) -> list[tuple]:
        return [args for call, args in self.calls if call == name]

    async def admin_login(self, username, password):
        return await self._respond("admin_login", username, password)

    async def filter_applications(self, criteria):
        return await self._respond("filter_applications", criteria)

    async def get_application(self, application_id):
        return await self._respond("get_application", application_id)

    async def create_application(self, payload):
        return await self._respond("create_application", payload)

    async def update_application_status(self, application_id, payload):
        return await self._respond("update_application_status", application_id, payload)

    async def update_processing_stage(self, application_id, payload):
        return await self._respond("update_processing_stage", application_id, payload)

    async def get_loan_history(self, borrower_id):
        return await self._respond("get_loan_history", borrower_id)

    async def filter_borrowers(self, criteria):
        return await self._respond("filter_borrowers", criteria)

    async def get_borrower_profile(self, borrower_id):
        return await self._respond("get_borrower_profile", borrower_id)

    async def create_borrower(self, payload):
        return await self._respond("create_borrower", payload)

    async def verify_kyc_document(self, borrower_id, payload):
        return await self._respond("verify_kyc_document", borrower_id, payload)

    async def update_borrower_status(self, borrower_id, payload):
        return await self._respond("update_borrower_status", borrower_id, payload)

    async def filter_repayments(self, criteria):
        return await self._respond("filter_repayments", criteria)

    async def get_repayment(self, repayment_id):
        return await self._respond("get_repayment", repayment_id)

    async def admin_collect(self, payload):
        return await self._respond("admin_collect", payload)

    async def waive_late_fee(self, repayment_id, payload):
        return await self._respond("waive_late_fee", repayment_id, payload)

    async def ping(self):
        return await self._respond("ping")


def upstream_error(status_code: int | None, message: str) -> LendingAPIError:
    return LendingAPIError(status_code, message, {"message": message})


# ---------------------------------------------------------------------------
# Payload factories
# ---------------------------------------------------------------------------


def make_application(**overrides) -> dict[str, Any]:
    application = {
        "id": "app-1",
        "displayId": "LA-0001",
        "applicationStatus": "PENDING",
        "loanAmount": 100000,
        "loanPurpose": "Medical",
        "cibil": 742,
        "createdAt": "2025-03-05T14:07:00",
        "borrower": {"id": "b-1", "displayId": "BR-0001", "name": "Asha Rao", "risk": "LOW"},
        "employmentDetails": {"employmentType": "SALARIED", "takeHomeSalary": 85000},
        "bankDetail": {"accountNumber": "123456789012", "ifscNumber": "HDFC0001234"},
        "loanConfig": {
            "platformFee": 500,
            "loanInterest": 12,
            "loanProtectionFee": 1000,
            "processingFee": 2000,
        },
        "loanDocuments": [
            {"documentType": "PAN", "documentUrls": ["https://files.test/pan.pdf"], "verified": True},
            {"documentType": "AADHAAR", "documentUrls": ["https://files.test/aadhaar.pdf"], "verified": False},
            {"documentType": "SALARY_SLIP", "documentUrls": [], "verified": False},
        ],
    }
    application.update(overrides)
    return application


def make_borrower(**overrides) -> dict[str, Any]:
    borrower = {
        "id": "b-1",
        "displayId": "BR-0001",
        "name": "Asha Rao",
        "email": "asha@example.com",
        "mobile": "9876543210",
        "dob": "1990-07-14",
        "gender": "FEMALE",
        "fathersName": "Mohan Rao",
        "active": True,
        "blackListed": False,
        "kycverified": False,
        "totalLoansCount": 2,
        "borrowerCibilData": {"score": 712, "rating": "Fair"},
        "employmentDetails": {
            "employmentType": "SALARIED",
            "companyName": "Acme",
            "designation": "Engineer",
            "takeHomeSalary": 125000,
            "totalExperienceInMonths": 48,
        },
        "kycDocuments": [
            {"documentType": "PAN", "documentNumber": "ABCDE1234F", "verified": True},
            {
                "documentType": "AADHAAR",
                "documentNumber": "",
                "verified": False,
                "apiResponse": {"result": {"dataFromAadhaar": {"maskedAadhaarNumber": "XXXX XXXX 4321"}}},
            },
        ],
        "payslips": {"documentType": "SALARY_SLIP", "documentUrls": ["https://files.test/slip.pdf"]},
        "bankStatement": None,
    }
    borrower.update(overrides)
    return borrower


def make_repayment(**overrides) -> dict[str, Any]:
    repayment = {
        "id": "rp-1",
        "loanId": "app-1",
        "loanDisplayId": "LA-0001",
        "borrowerName": "Asha Rao",
        "borrowerDisplayId": "BR-0001",
        "dueLoanAmount": 10000,
        "dueDate": "2025-01-20",
        "lateDays": 5,
        "lateFeePerDay": 50,
        "lateFeeCharged": 250,
        "waivedLateFeeAmount": 100,
        "amountToBePaid": 10250,
        "amountPaid": 250,
        "pendingAmount": 10000,
        "status": "OVERDUE",
        "paymentHistory": [],
    }
    repayment.update(overrides)
    return repayment


# ---------------------------------------------------------------------------
# Shared pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _disable_rate_limiter():
    """Keep the default limits in memory for all tests."""
    original = app.state.limiter
    app.state.limiter = Limiter(
        key_func=get_remote_address,
        storage_uri="memory://",
    )
    yield
    app.state.limiter = original


@pytest.fixture
def fake_redis(monkeypatch) -> FakeRedis:
    from loan_console.core import health
    from loan_console.utils import login_security

    redis = FakeRedis()
    monkeypatch.setattr(deps, "get_redis_client", lambda: redis)
    monkeypatch.setattr(login_security, "get_redis_client", lambda: redis)
    monkeypatch.setattr(health, "get_redis_client", lambda: redis)
    return redis


@pytest.fixture
def fake_lending() -> FakeLendingClient:
    return FakeLendingClient()


@pytest.fixture
def admin_session() -> AdminSession:
    now = datetime.now(timezone.utc)
    return AdminSession(
        session_id="sid-1",
        username="admin",
        upstream_token="upstream-token",
        created_at=now,
        last_active_at=now,
    )


@pytest.fixture
def override_deps(fake_redis, fake_lending, admin_session):
    """Standard overrides: signed-in admin, fake upstream, in-memory session store."""

    async def _get_session():
        return admin_session

    async def _get_client():
        return fake_lending

    app.dependency_overrides[deps.get_current_session] = _get_session
    app.dependency_overrides[deps.get_lending_client] = _get_client
    app.dependency_overrides[deps.get_public_lending_client] = _get_client
    app.dependency_overrides[deps.get_session_store] = lambda: SessionStore(fake_redis)

    yield

    app.dependency_overrides.clear()


@pytest.fixture
def client(override_deps) -> TestClient:
    return TestClient(app)
