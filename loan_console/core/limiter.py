from slowapi import Limiter
from slowapi.util import get_remote_address

from loan_console.core.settings import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_per_minute}/minute"],
    storage_uri=settings.rate_limit_storage_uri or settings.redis_url,
)


def login_rate_limit() -> str:
    # Login gets a tighter budget than ordinary console reads.
    return f"{max(1, settings.rate_limit_per_minute // 4)}/minute"


__all__ = ["limiter", "login_rate_limit"]
