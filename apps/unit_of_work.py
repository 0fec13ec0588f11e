"""Application unit of work: typed repository accessors over the framework UnitOfWork."""

from framework.repository.unit_of_work import UnitOfWork
from apps.users.models import User
from apps.users.repository import IUserRepository, UserRepository


class AppUnitOfWork(UnitOfWork):
    """One repository property per entity type; each is created on first access."""

    repository_classes = {User: UserRepository}

    @property
    def users(self) -> IUserRepository:
        return self.repository(User)
