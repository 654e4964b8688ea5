import logging
import re
from typing import Any, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from user_api import crud
from user_api.auth import create_access_token, get_password_hash, verify_password
from user_api.config import Settings
from user_api.errors import ErrorKind, ServiceError
from user_api.models.users import User
from user_api.schemas.user_schemas import UserCreate, UserUpdate, validate_payload

logger = logging.getLogger(__name__)

USER_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")

def _check_user_id(user_id: str, failure_message: str) -> None:
    # A malformed id is a store-level failure, not a miss
    if not USER_ID_PATTERN.fullmatch(user_id or ""):
        logger.error(f"Rejected malformed user id '{user_id}'.")
        raise ServiceError(ErrorKind.STORE_FAILURE, failure_message)

def _store_failure(db: Session, e: Exception, kind: ErrorKind, message: str) -> ServiceError:
    logger.error(f"{message} {e}", exc_info=True)
    db.rollback()
    return ServiceError(kind, message)


def create_user(db: Session, payload: Any) -> User:
    """
    Validates the payload, rejects a duplicate email, and stores the user with a hashed password.
    """
    user_in, error = validate_payload(UserCreate, payload)
    if error:
        raise ServiceError(ErrorKind.VALIDATION, error)

    try:
        existing = crud.get_user_by_email(db, user_in.email)
    except SQLAlchemyError as e:
        raise _store_failure(db, e, ErrorKind.SAVE_REJECTED, "Error saving user.")
    if existing:
        logger.warning(f"Create rejected: email {user_in.email} already registered.")
        raise ServiceError(ErrorKind.DUPLICATE_EMAIL, "User already exists.")

    fields = {
        "name": user_in.name,
        "email": user_in.email,
        "password": get_password_hash(user_in.password),
    }
    if user_in.role is not None:
        fields["role"] = user_in.role

    try:
        user = crud.insert_user(db, User(**fields))
    except SQLAlchemyError as e:
        # Includes losing a concurrent insert race on the unique email index
        raise _store_failure(db, e, ErrorKind.SAVE_REJECTED, "Error saving user.")

    logger.info(f"Created user {user.id} ({user.email}) with role '{user.role.value}'.")
    return user


def list_users(db: Session) -> List[User]:
    try:
        return crud.list_users(db)
    except SQLAlchemyError as e:
        raise _store_failure(db, e, ErrorKind.STORE_FAILURE, "Error retrieving users.")


def get_user(db: Session, user_id: str) -> User:
    _check_user_id(user_id, "Error retrieving user.")
    try:
        user = crud.get_user(db, user_id)
    except SQLAlchemyError as e:
        raise _store_failure(db, e, ErrorKind.STORE_FAILURE, "Error retrieving user.")
    if not user:
        raise ServiceError(ErrorKind.NOT_FOUND, "User not found.")
    return user


def update_user(db: Session, user_id: str, payload: Any) -> User:
    """
    Applies a partial update. Only the supplied fields change; a supplied password is re-hashed.
    """
    user_in, error = validate_payload(UserUpdate, payload)
    if error:
        raise ServiceError(ErrorKind.VALIDATION, error)

    changes = user_in.model_dump(exclude_unset=True)
    if changes.get("password"):
        changes["password"] = get_password_hash(changes["password"])
    # Explicit nulls would blank NOT NULL columns
    changes = {field: value for field, value in changes.items() if value is not None}

    _check_user_id(user_id, "Error updating user.")
    try:
        user = crud.get_user(db, user_id)
        if not user:
            raise ServiceError(ErrorKind.NOT_FOUND, "User not found.")
        user = crud.update_user(db, user, changes)
    except SQLAlchemyError as e:
        raise _store_failure(db, e, ErrorKind.STORE_FAILURE, "Error updating user.")

    logger.info(f"Updated user {user.id}: fields {sorted(changes)}.")
    return user


def delete_user(db: Session, user_id: str) -> None:
    _check_user_id(user_id, "Error deleting user.")
    try:
        user = crud.get_user(db, user_id)
        if not user:
            raise ServiceError(ErrorKind.NOT_FOUND, "User not found.")
        crud.delete_user(db, user)
    except SQLAlchemyError as e:
        raise _store_failure(db, e, ErrorKind.STORE_FAILURE, "Error deleting user.")
    logger.info(f"Deleted user {user_id}.")


def login(db: Session, payload: Any, settings: Settings) -> str:
    """
    Checks an email/password pair and returns a signed token for the matching user.
    """
    payload = payload if isinstance(payload, dict) else {}
    email = payload.get("email")
    password = payload.get("password")

    try:
        user = crud.get_user_by_email(db, email) if isinstance(email, str) else None
    except SQLAlchemyError as e:
        raise _store_failure(db, e, ErrorKind.STORE_FAILURE, "Error logging in.")
    if not user:
        logger.warning(f"Login failed: no user with email {email}.")
        raise ServiceError(ErrorKind.UNKNOWN_EMAIL, "User not found.")

    if not isinstance(password, str) or not verify_password(password, user.password):
        logger.warning(f"Login failed: wrong password for user {user.id}.")
        raise ServiceError(ErrorKind.CREDENTIAL_MISMATCH, "Invalid password.")

    try:
        token = create_access_token(user.id, user.role.value, settings)
    except Exception as e:
        logger.error(f"Could not sign token for user {user.id}: {e}", exc_info=True)
        raise ServiceError(ErrorKind.STORE_FAILURE, "Error logging in.")

    logger.info(f"User {user.id} logged in.")
    return token
