# user_api/database.py

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from user_api.config import settings

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

# SQLite connections are handed between FastAPI's worker threads
connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def init_db():
    """Creates the tables if they don't exist."""
    Base.metadata.create_all(bind=engine)

def close_db():
    """Releases every pooled connection."""
    engine.dispose()

def get_db():
    """Dependency to get a DB session for a request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
