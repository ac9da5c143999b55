import logging

from fastapi import HTTPException, status
from redis.exceptions import RedisError

from loan_console.core.settings import settings
from loan_console.utils.redis_client import get_redis_client

logger = logging.getLogger(__name__)


def _ttl(seconds: int) -> int:
    return max(1, seconds)


def _identifier(username: str) -> str:
    return username.strip().lower()


async def check_lockout(username: str) -> None:
    redis = get_redis_client()
    try:
        locked = await redis.get(f"login:lock:{_identifier(username)}")
    except RedisError:
        logger.warning("Lockout check skipped; redis unavailable")
        return
    if locked:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts; try later",
        )


async def register_login_attempt(username: str, success: bool) -> None:
    redis = get_redis_client()
    ident = _identifier(username)
    fail_key = f"login:fail:{ident}"
    lock_key = f"login:lock:{ident}"
    window = _ttl(settings.login_lockout_minutes * 60)
    try:
        if success:
            await redis.delete(fail_key, lock_key)
            return
        attempts = await redis.incr(fail_key)
        await redis.expire(fail_key, window)
        if attempts >= settings.login_attempt_limit:
            await redis.setex(lock_key, window, 1)
            await redis.delete(fail_key)
            locked = True
        else:
            locked = False
    except RedisError:
        logger.warning("Login attempt not recorded; redis unavailable")
        return
    if locked:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Account temporarily locked due to failed attempts",
        )
