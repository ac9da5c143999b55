from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RuleViolation(ValueError):
    """A console action the current upstream state does not allow."""

    code: str
    message: str
    details: dict = field(default_factory=dict)
    status_code: int = 409

    def __str__(self) -> str:
        return self.message

    def as_detail(self) -> dict:
        return {"code": self.code, "message": self.message, "details": self.details}
