# user_api/main.py

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import Body, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

# --- Local Imports ---
from user_api.logging_config import setup_logging
from user_api.config import Settings, get_settings, settings
from user_api.auth import require_role
from user_api.database import get_db, init_db, close_db
from user_api.errors import ServiceError
from user_api.models.users import UserRole
from user_api.schemas.user_schemas import UserResponse, Token
from user_api.services import user_service

# --- SETUP LOGGING ---
setup_logging(settings.LOG_DIR, settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Creating database tables if they don't exist...")
    init_db()
    logger.info(f"User API ready (role source: {settings.ROLE_SOURCE}).")
    yield
    logger.info("Shutting down: disposing database connections.")
    close_db()


# --- Create FastAPI app instance ---
app = FastAPI(
    title="User Management API",
    lifespan=lifespan,
)

require_admin = require_role(UserRole.ADMIN.value)


# --- ERROR MAPPING ---
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return PlainTextResponse(exc.message, status_code=exc.status_code)

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request.") if errors else "Invalid request."
    return PlainTextResponse(message, status_code=status.HTTP_400_BAD_REQUEST)


# --- ENDPOINTS ---
@app.get("/", response_class=PlainTextResponse)
def root():
    return "Welcome to the backend server!"

@app.post(
    "/create",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_user(payload: Optional[Dict[str, Any]] = Body(None), db: Session = Depends(get_db)):
    """
    Creates a user. Admin only.
    """
    return user_service.create_user(db, payload)

@app.get("/all", response_model=List[UserResponse])
def get_all_users(db: Session = Depends(get_db)):
    return user_service.list_users(db)

@app.get("/byId/{user_id}", response_model=UserResponse)
def get_user_by_id(user_id: str, db: Session = Depends(get_db)):
    return user_service.get_user(db, user_id)

@app.put("/update/{user_id}", response_model=UserResponse, dependencies=[Depends(require_admin)])
def update_user(
    user_id: str,
    payload: Optional[Dict[str, Any]] = Body(None),
    db: Session = Depends(get_db),
):
    """
    Updates the supplied fields of a user. Admin only.
    """
    return user_service.update_user(db, user_id, payload or {})

@app.delete("/delete/{user_id}", response_class=PlainTextResponse, dependencies=[Depends(require_admin)])
def delete_user(user_id: str, db: Session = Depends(get_db)):
    user_service.delete_user(db, user_id)
    return "User deleted."

@app.post("/login", response_model=Token)
def login(
    payload: Optional[Dict[str, Any]] = Body(None),
    db: Session = Depends(get_db),
    app_settings: Settings = Depends(get_settings),
):
    """
    Authenticates a user with email and password and returns a signed token.
    """
    token = user_service.login(db, payload, app_settings)
    return {"token": token}


def run():
    """Console entry point: serves the app on the configured port."""
    uvicorn.run("user_api.main:app", host="0.0.0.0", port=settings.PORT)

if __name__ == "__main__":
    run()
