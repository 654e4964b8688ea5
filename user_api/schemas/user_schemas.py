# user_api/schemas/user_schemas.py

from typing import Any, Optional, Type
from email_validator import validate_email
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from user_api.models.users import UserRole

# bcrypt ignores everything past this many bytes of the secret
MAX_PASSWORD_BYTES = 72

# Order used in the role error message
ROLE_CHOICES = (UserRole.ADMIN, UserRole.USER)

def _check_password_length(value: Optional[str]) -> Optional[str]:
    if value is not None and len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError("password too long")
    return value

def _check_email(value: Optional[str]) -> Optional[str]:
    # Stored exactly as submitted so login matches the registered string
    if value is not None:
        validate_email(value, check_deliverability=False)
    return value

class UserCreate(BaseModel):
    """Payload accepted by the create endpoint."""
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    email: str
    password: str = Field(min_length=1)
    role: Optional[UserRole] = None

    @field_validator("email")
    @classmethod
    def email_is_well_formed(cls, value):
        return _check_email(value)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value):
        return _check_password_length(value)

class UserUpdate(BaseModel):
    """Partial patch: every field optional, present fields follow the create rules."""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=1)
    role: Optional[UserRole] = None

    @field_validator("email")
    @classmethod
    def email_is_well_formed(cls, value):
        return _check_email(value)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value):
        return _check_password_length(value)

class UserResponse(BaseModel):
    """User as returned by the API. Note: includes the password hash."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    password: str
    role: UserRole

class Token(BaseModel):
    token: str

class TokenClaims(BaseModel):
    """Claims carried by a verified access token."""
    user_id: str
    role: UserRole


def _describe(error: dict) -> str:
    """Turns the first pydantic error into a one-line message about that field."""
    loc = error.get("loc") or ("value",)
    field = str(loc[0])
    kind = error.get("type", "")
    if kind == "missing":
        return f'"{field}" is required'
    if kind == "extra_forbidden":
        return f'"{field}" is not allowed'
    if kind == "string_too_short":
        return f'"{field}" is not allowed to be empty'
    if kind == "enum":
        allowed = ", ".join(role.value for role in ROLE_CHOICES)
        return f'"{field}" must be one of [{allowed}]'
    if kind == "string_type":
        return f'"{field}" must be a string'
    if field == "email":
        return '"email" must be a valid email'
    if field == "password" and kind == "value_error":
        return f'"password" must not exceed {MAX_PASSWORD_BYTES} bytes'
    return f'"{field}" {error.get("msg", "is invalid")}'

def validate_payload(schema: Type[BaseModel], payload: Any):
    """
    Validates a raw request body against `schema`.

    Returns `(model, None)` when valid, or `(None, message)` describing the first failing field.
    """
    if not isinstance(payload, dict):
        return None, '"value" must be of type object'
    try:
        return schema.model_validate(payload), None
    except ValidationError as e:
        return None, _describe(e.errors()[0])
