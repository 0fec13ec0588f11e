"""
Repository pattern: data access abstraction, decouples service layer from database session.
"""

from .base import BaseRepository, IRepository
from .result import Failed, Found, NotFound, Result
from .unit_of_work import UnitOfWork

__all__ = [
    "BaseRepository",
    "IRepository",
    "UnitOfWork",
    "Result",
    "Found",
    "NotFound",
    "Failed",
]
