import contextvars

_admin: contextvars.ContextVar[str] = contextvars.ContextVar("admin", default="-")
_request_id: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")


def set_admin(username: str) -> None:
    _admin.set(username)


def get_admin() -> str:
    return _admin.get()


def set_request_id(request_id: str) -> None:
    _request_id.set(request_id)


def get_request_id() -> str:
    return _request_id.get()


def clear_context() -> None:
    _admin.set("-")
    _request_id.set("-")
