from typing import Any, Generic, Optional, TypeVar
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

DataT = TypeVar("DataT")


class ResponseModel(BaseModel, Generic[DataT]):
    """Response envelope shared by every route: {code, message, data}."""
    code: int = 200
    message: str = "success"
    data: Optional[DataT] = None

    @staticmethod
    def success(data: Any = None, message: str = "success"):
        return {"code": 200, "message": message, "data": jsonable_encoder(data)}

    @staticmethod
    def fail(code: int = 400, message: str = "error", data: Any = None):
        return {"code": code, "message": message, "data": jsonable_encoder(data)}
