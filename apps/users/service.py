from typing import List
from uuid import UUID
from sqlalchemy.exc import IntegrityError
from framework.exceptions.handler import BusinessException, EntityNotFoundException
from framework.logging.logger import get_logger
from apps.unit_of_work import AppUnitOfWork
from .models import User

logger = get_logger("users.service")


class UserService:
    def __init__(self, uow: AppUnitOfWork):
        """Initialize User Service with UnitOfWork."""
        self.uow = uow

    async def list_users(self) -> List[User]:
        return await self.uow.users.all()

    async def get_user(self, user_id: UUID) -> User:
        user = await self.uow.users.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundException("User", user_id)
        return user

    async def get_user_by_email(self, email: str) -> User:
        user = await self.uow.users.get_by_email(email)
        if user is None:
            raise EntityNotFoundException("User", email)
        return user

    async def create_user(self, first_name: str, last_name: str, email: str, password: str) -> User:
        """Create a user; the email must not be registered yet."""
        if await self.uow.users.find(User.email == email):
            raise BusinessException("Email already registered", status_code=400, code=4001)

        user = User(first_name=first_name, last_name=last_name, email=email, password=password)
        if not await self.uow.users.add(user):
            raise BusinessException("Failed to create user", status_code=500, code=500)

        logger.info(f"User {user.id} created")
        return user

    async def upsert_user(self, user_id: UUID, first_name: str, last_name: str, email: str, password: str) -> User:
        """Create or replace the user with this ID."""
        if await self.uow.users.find(User.email == email, User.id != user_id):
            raise BusinessException("Email already registered", status_code=400, code=4001)

        user = User(id=user_id, first_name=first_name, last_name=last_name, email=email, password=password)
        try:
            async with await self.uow.begin_transaction() as transaction:
                if not await self.uow.users.upsert(user):
                    raise BusinessException("Failed to save user", status_code=500, code=500)
                await self.uow.complete()
                await transaction.commit()
        except IntegrityError as e:
            error_msg = str(e.orig) if hasattr(e, "orig") else str(e)
            logger.warning(f"User {user_id} upsert rejected: {error_msg}")
            raise BusinessException("Email already registered", status_code=400, code=4001)

        logger.info(f"User {user_id} saved")
        return await self.get_user(user_id)

    async def delete_user(self, user_id: UUID) -> None:
        if not await self.uow.users.delete(user_id):
            raise EntityNotFoundException("User", user_id)
        await self.uow.complete()
        logger.info(f"User {user_id} deleted")
