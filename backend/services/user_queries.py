# services/user_queries.py — Persistence access for users
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from auth import AuthService
from models import User, Task, RevokedToken
from services.errors import DuplicateEmail


class UserQuery:
    """Query layer over the users table. Passwords are hashed on the way in."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _commit_unique(self, message: str) -> None:
        # The unique index on users.email backs up the service-level check
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateEmail(message)

    async def create_user(self, name: str, email: str, password: str) -> User:
        user = User(
            name=name,
            email=email,
            password_hash=AuthService.hash_password(password),
        )
        self.db.add(user)
        await self._commit_unique("Email address is already registered")
        await self.db.refresh(user)
        return user

    async def find_user_by_id(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def find_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_all_users(self) -> List[User]:
        stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def update_user(self, user_id: int, updates: Dict[str, Any]) -> User:
        user = await self.find_user_by_id(user_id)
        for key, value in updates.items():
            if key == "password":
                user.password_hash = AuthService.hash_password(value)
            else:
                setattr(user, key, value)
        await self._commit_unique("Email address is already taken")
        await self.db.refresh(user)
        return user

    async def delete_user(self, user_id: int) -> None:
        """Delete a user together with everything they own."""
        await self.db.execute(delete(Task).where(Task.user_id == user_id))
        await self.db.execute(delete(RevokedToken).where(RevokedToken.user_id == user_id))
        await self.db.execute(delete(User).where(User.id == user_id))
        await self.db.commit()

    async def email_exists(self, email: str, exclude_user_id: Optional[int] = None) -> bool:
        stmt = select(User.id).where(User.email == email)
        if exclude_user_id is not None:
            stmt = stmt.where(User.id != exclude_user_id)
        result = await self.db.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def get_user_with_tasks(self, user_id: int) -> Optional[User]:
        stmt = (
            select(User)
            .where(User.id == user_id)
            .options(selectinload(User.tasks))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def count_users(self) -> int:
        result = await self.db.execute(select(func.count(User.id)))
        return result.scalar() or 0
