"""
Model registration: import every table model here so SQLModel.metadata knows it
before the schema is created at startup.
"""
from apps.users.models import User

__all__ = ["User"]
