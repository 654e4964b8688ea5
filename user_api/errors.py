# user_api/errors.py

import enum

class ErrorKind(str, enum.Enum):
    """Every way a user-service operation can fail."""
    VALIDATION = "validation"
    DUPLICATE_EMAIL = "duplicate_email"
    SAVE_REJECTED = "save_rejected"
    UNKNOWN_EMAIL = "unknown_email"
    CREDENTIAL_MISMATCH = "credential_mismatch"
    AUTHORIZATION_DENIED = "authorization_denied"
    NOT_FOUND = "not_found"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_INVALID = "token_invalid"
    STORE_FAILURE = "store_failure"

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.DUPLICATE_EMAIL: 400,
    # A failed insert answers 400; every other store failure answers 500
    ErrorKind.SAVE_REJECTED: 400,
    ErrorKind.UNKNOWN_EMAIL: 400,
    ErrorKind.CREDENTIAL_MISMATCH: 400,
    ErrorKind.AUTHORIZATION_DENIED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.TOKEN_EXPIRED: 401,
    ErrorKind.TOKEN_INVALID: 401,
    ErrorKind.STORE_FAILURE: 500,
}

class ServiceError(Exception):
    """A failure carrying its kind and the fixed message shown to the client."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def __repr__(self):
        return f"ServiceError({self.kind.value!r}, {self.message!r})"
