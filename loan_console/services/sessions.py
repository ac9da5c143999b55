"""Admin console sessions.

The upstream lending API issues a bearer token at login. The console keeps
that token server-side in Redis, keyed by a random session id, and hands the
browser only a signed console token referencing the session id.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from redis.asyncio import Redis

from loan_console.core.settings import settings

SESSION_KEY_PREFIX = "console:session:"


class SessionExpired(Exception):
    pass


@dataclass(slots=True)
class AdminSession:
    session_id: str
    username: str
    upstream_token: str
    created_at: datetime
    last_active_at: datetime


def _key(session_id: str) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"


def _parse_ts(value: str | None) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    return datetime.fromisoformat(value)


class SessionStore:
    def __init__(self, redis: Redis) -> None:
        self.redis = redis

    @property
    def ttl_seconds(self) -> int:
        return max(1, settings.access_token_expire_minutes * 60)

    async def create(self, username: str, upstream_token: str) -> AdminSession:
        now = datetime.now(timezone.utc)
        session = AdminSession(
            session_id=secrets.token_urlsafe(24),
            username=username,
            upstream_token=upstream_token,
            created_at=now,
            last_active_at=now,
        )
        key = _key(session.session_id)
        await self.redis.hset(
            key,
            mapping={
                "username": session.username,
                "upstream_token": session.upstream_token,
                "created_at": session.created_at.isoformat(),
                "last_active_at": session.last_active_at.isoformat(),
            },
        )
        await self.redis.expire(key, self.ttl_seconds)
        return session

    async def get(self, session_id: str) -> AdminSession | None:
        data = await self.redis.hgetall(_key(session_id))
        if not data or not data.get("upstream_token"):
            return None
        return AdminSession(
            session_id=session_id,
            username=data.get("username", ""),
            upstream_token=data["upstream_token"],
            created_at=_parse_ts(data.get("created_at")),
            last_active_at=_parse_ts(data.get("last_active_at")),
        )

    async def touch(self, session: AdminSession, now: datetime | None = None) -> AdminSession:
        """Slide the idle window, revoking the session once it has been idle too long."""
        current = now or datetime.now(timezone.utc)
        timeout = timedelta(minutes=settings.session_timeout_minutes)
        if current - session.last_active_at > timeout:
            await self.revoke(session.session_id)
            raise SessionExpired("Session expired due to inactivity")
        session.last_active_at = current
        await self.redis.hset(_key(session.session_id), "last_active_at", current.isoformat())
        return session

    async def revoke(self, session_id: str) -> None:
        await self.redis.delete(_key(session_id))
