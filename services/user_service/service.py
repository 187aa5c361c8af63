from typing import List

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from .models import User
from .repository import UserRepository
from .schemas import UserCreate


class UserService:

    @staticmethod
    async def create_user(db: AsyncSession, data: UserCreate) -> User:
        existing = await UserRepository.get_by_username_or_email(db, data.username, data.email)
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Username or email already registered",
            )
        user = User(username=data.username, email=data.email, full_name=data.full_name)
        return await UserRepository.create(db, user)

    @staticmethod
    async def list_users(db: AsyncSession) -> List[User]:
        return await UserRepository.get_all(db)

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: int) -> User:
        return UserService._found(await UserRepository.get_by_id(db, user_id))

    @staticmethod
    async def get_user_by_username(db: AsyncSession, username: str) -> User:
        return UserService._found(await UserRepository.get_by_username(db, username))

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> User:
        return UserService._found(await UserRepository.get_by_email(db, email))

    @staticmethod
    def _found(user) -> User:
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user
