from uuid import UUID
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlmodel.ext.asyncio.session import AsyncSession
from framework.database.manager import get_db
from framework.response import ResponseModel
from apps.unit_of_work import AppUnitOfWork
from ..models import User
from ..service import UserService

router = APIRouter()

class UserSchema(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=1)

class UserOut(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(id=user.id, first_name=user.first_name, last_name=user.last_name, email=user.email)

async def get_uow(db: AsyncSession = Depends(get_db)):
    """Dependency: one AppUnitOfWork per request, disposed after the response."""
    async with AppUnitOfWork(session=db) as uow:
        yield uow

def get_user_service(uow: AppUnitOfWork = Depends(get_uow)) -> UserService:
    """Dependency: create UserService."""
    return UserService(uow)

@router.get("/")
async def list_users(service: UserService = Depends(get_user_service)):
    users = await service.list_users()
    return ResponseModel.success(data=[UserOut.from_user(u) for u in users])

@router.get("/by-email")
async def get_user_by_email(email: str, service: UserService = Depends(get_user_service)):
    user = await service.get_user_by_email(email)
    return ResponseModel.success(data=UserOut.from_user(user))

@router.get("/{user_id}")
async def get_user(user_id: UUID, service: UserService = Depends(get_user_service)):
    user = await service.get_user(user_id)
    return ResponseModel.success(data=UserOut.from_user(user))

@router.post("/")
async def create_user(data: UserSchema, service: UserService = Depends(get_user_service)):
    user = await service.create_user(data.first_name, data.last_name, data.email, data.password)
    return ResponseModel.success(data=UserOut.from_user(user))

@router.put("/{user_id}")
async def upsert_user(user_id: UUID, data: UserSchema, service: UserService = Depends(get_user_service)):
    """Create the user with this ID, or replace its fields."""
    user = await service.upsert_user(user_id, data.first_name, data.last_name, data.email, data.password)
    return ResponseModel.success(data=UserOut.from_user(user))

@router.delete("/{user_id}")
async def delete_user(user_id: UUID, service: UserService = Depends(get_user_service)):
    await service.delete_user(user_id)
    return ResponseModel.success(data={"id": user_id})
