from typing import Optional
from loguru import logger

from newsroom.core.security import create_access_token, get_password_hash, verify_password
from newsroom.models.user import User
from newsroom.services.storage import DatabaseStorage


class AuthService:
    def __init__(self, storage: DatabaseStorage):
        self.storage = storage

    def register_user(self, username: str, password: str, is_admin: bool = False) -> User:
        # create_user rejects a taken username
        user = self.storage.create_user(username.strip(), get_password_hash(password), is_admin=is_admin)
        logger.info(f"Registered user {user.id} ({user.username}), admin={user.is_admin}")
        return user

    def authenticate_user(self, username: str, password: str) -> Optional[User]:
        user = self.storage.get_user_by_username(username.strip())
        if not user or not verify_password(password, user.password_hash):
            logger.warning(f"Failed login for '{username}'")
            return None
        return user

    def issue_token(self, user: User) -> str:
        return create_access_token(data={"sub": user.username})

    def ensure_admin(self, username: str, password: str) -> User:
        """Create the bootstrap administrator, or promote the existing account."""
        user = self.storage.get_user_by_username(username)
        if not user:
            return self.register_user(username, password, is_admin=True)
        if not user.is_admin:
            user.is_admin = True
            self.storage.session.add(user)
            self.storage.session.commit()
            self.storage.session.refresh(user)
            logger.info(f"Promoted {username} to administrator")
        return user
