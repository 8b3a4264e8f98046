# routers/auth.py — Registration, login and profile endpoints
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from auth import UserRegister, UserLogin, UserUpdate, get_current_user, CurrentUser
from database import get_db_session
from services.account_service import AccountService

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def get_account_service(db: AsyncSession = Depends(get_db_session)) -> AccountService:
    return AccountService(db)


# --- Public ---

@router.post("/register", status_code=201)
async def register(
    user_data: UserRegister,
    service: AccountService = Depends(get_account_service),
):
    """Register a new user account"""
    return await service.register(user_data.model_dump())


@router.post("/login")
async def login(
    credentials: UserLogin,
    service: AccountService = Depends(get_account_service),
):
    """Authenticate and receive a token"""
    return await service.login(credentials.model_dump())


# --- Authenticated ---

@router.get("/profile")
async def profile(
    user: CurrentUser = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
):
    """Get the current user's profile"""
    return await service.get_profile(user.id)


@router.get("/profile/todos")
async def profile_with_todos(
    user: CurrentUser = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
):
    """Get the current user's profile together with their todos"""
    return await service.get_profile_with_tasks(user.id)


@router.put("/profile")
async def update_profile(
    data: UserUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
):
    """Update name, email or password"""
    return await service.update_profile(user.id, data.model_dump(exclude_unset=True))


@router.post("/logout")
async def logout(
    user: CurrentUser = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
):
    """Revoke the token used for this request"""
    return await service.logout(user)


@router.delete("/account")
async def delete_account(
    user: CurrentUser = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
):
    """Delete the current account and all of its todos"""
    return await service.delete_account(user.id)


@router.get("/users")
async def list_users(
    user: CurrentUser = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
):
    """List every user (intended for administrators; no role check exists)"""
    return await service.get_all_users()
