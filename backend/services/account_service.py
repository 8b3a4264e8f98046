# services/account_service.py — Registration, login and profile management
import logging
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from auth import AuthService, CurrentUser
from services.errors import NotFound, DuplicateEmail, InvalidCredentials
from services.projections import (
    project_task, project_user, TASK_LISTED, USER_FULL, USER_BRIEF, USER_UPDATED,
)
from services.user_queries import UserQuery

logger = logging.getLogger("todo-api.accounts")


class AccountService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.queries = UserQuery(db)

    async def register(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        # Checked here as well as by the unique index; the two steps are not atomic
        existing = await self.queries.find_user_by_email(payload["email"])
        if existing:
            raise DuplicateEmail("Email address is already registered")

        user = await self.queries.create_user(
            name=payload["name"],
            email=payload["email"],
            password=payload["password"],
        )
        token = AuthService.issue_token(user)
        logger.info(f"User {user.id} registered")
        return {
            "message": "User registered successfully",
            "user": project_user(user, USER_FULL),
            "token": token,
        }

    async def login(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        email = payload.get("email", "")
        try:
            token = await AuthService.attempt(email, payload.get("password", ""), self.db)
        except InvalidCredentials:
            logger.warning("Failed login attempt")
            raise
        except Exception:
            # Internal failures look the same to the caller as bad credentials
            logger.error("Login failed unexpectedly", exc_info=True)
            raise InvalidCredentials("Invalid email or password") from None

        user = await self.queries.find_user_by_email(email)
        if not user:
            raise InvalidCredentials("Invalid email or password")
        return {
            "message": "Login successful",
            "user": project_user(user, USER_BRIEF),
            "token": token,
        }

    async def get_profile(self, user_id: int) -> Dict[str, Any]:
        user = await self.queries.find_user_by_id(user_id)
        if not user:
            raise NotFound("User not found")
        return {"user": project_user(user, USER_FULL)}

    async def get_profile_with_tasks(self, user_id: int) -> Dict[str, Any]:
        user = await self.queries.get_user_with_tasks(user_id)
        if not user:
            raise NotFound("User not found")
        profile = project_user(user, USER_FULL)
        profile["todos"] = [project_task(t, TASK_LISTED) for t in user.tasks]
        return {"user": profile}

    async def update_profile(self, user_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        user = await self.queries.find_user_by_id(user_id)
        if not user:
            raise NotFound("User not found")

        new_email = payload.get("email")
        if new_email and new_email != user.email:
            if await self.queries.email_exists(new_email, exclude_user_id=user_id):
                raise DuplicateEmail("Email address is already taken")

        updates = {k: v for k, v in payload.items() if k in ("name", "email", "password") and v is not None}
        updated = await self.queries.update_user(user_id, updates)
        return {
            "message": "Profile updated successfully",
            "user": project_user(updated, USER_UPDATED),
        }

    async def delete_account(self, user_id: int) -> Dict[str, Any]:
        user = await self.queries.find_user_by_id(user_id)
        if not user:
            raise NotFound("User not found")

        await self.queries.delete_user(user_id)
        logger.info(f"User {user_id} deleted their account")
        return {"message": "Account deleted successfully"}

    async def logout(self, session: CurrentUser) -> Dict[str, Any]:
        if session.jti and session.expires_at:
            await AuthService.revoke_token(session.jti, session.id, session.expires_at, self.db)
        logger.info(f"User {session.id} logged out")
        return {"message": "Logged out successfully"}

    async def get_all_users(self) -> Dict[str, Any]:
        """Unscoped user listing. No admin role exists, so any authenticated caller reaches it."""
        logger.warning("Unscoped user listing requested")
        users = await self.queries.get_all_users()
        return {
            "users": [project_user(u, USER_FULL) for u in users],
            "total": await self.queries.count_users(),
        }
