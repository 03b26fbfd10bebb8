"""User repository - Read access to the user directory"""

from typing import Optional

from sqlalchemy.orm import Session

from ..models.user import User


class UserRepository:
    """Read access to the user directory"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def list_usernames(self) -> list[str]:
        rows = self.db.query(User.username).order_by(User.username.asc()).all()
        return [row.username for row in rows]
