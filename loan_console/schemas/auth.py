from datetime import datetime

from pydantic import Field, field_validator
from pydantic_core import PydanticCustomError

from loan_console.schemas.common import ConsoleModel

LOGIN_FORM_ERROR = "Please enter valid credentials"


class LoginRequest(ConsoleModel):
    username: str = Field(default="", validate_default=True, max_length=150)
    password: str = Field(default="", validate_default=True, max_length=256)

    @field_validator("username", mode="before")
    @classmethod
    def username_required(cls, v):
        value = (v or "").strip()
        if not value:
            raise PydanticCustomError("required", "User name is required")
        return value

    @field_validator("password", mode="before")
    @classmethod
    def password_required(cls, v):
        if not v:
            raise PydanticCustomError("required", "Password is required")
        return v


class LoginResponse(ConsoleModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    username: str


class AdminOut(ConsoleModel):
    username: str
    logged_in_at: datetime
    last_active_at: datetime
