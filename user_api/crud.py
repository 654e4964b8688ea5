# user_api/crud.py

from typing import List, Optional
from sqlalchemy.orm import Session

from user_api.models.users import User


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()

def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.get(User, user_id)

def list_users(db: Session) -> List[User]:
    return db.query(User).all()

def insert_user(db: Session, user: User) -> User:
    db.add(user)
    db.commit()
    db.refresh(user)
    return user

def update_user(db: Session, user: User, changes: dict) -> User:
    """Copies `changes` onto the record and persists it."""
    for field, value in changes.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return user

def delete_user(db: Session, user: User) -> None:
    db.delete(user)
    db.commit()
