"""
Uniform JSON envelope for API responses.

Success: {"statusCode": 200, "message": "...", "data": ...}
Failure: {"statusCode": 422, "message": "...", "errors": {...}}
"""

from typing import Any, Dict, Generic, Optional, TypeVar

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponseModel(BaseModel, Generic[T]):
    """Success envelope, used for OpenAPI documentation"""
    status_code: int = Field(200, alias="statusCode")
    message: Optional[str] = None
    data: Optional[T] = None


class ApiErrorModel(BaseModel):
    """Failure envelope, used for OpenAPI documentation"""
    status_code: int = Field(..., alias="statusCode")
    message: str
    errors: Dict[str, Any] = {}


class ApiResponse:
    """Builders for the response envelope"""

    @staticmethod
    def success(data: Any = None, message: Optional[str] = None, status_code: int = 200) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content={
                "statusCode": status_code,
                "message": message,
                "data": jsonable_encoder(data),
            },
        )

    @staticmethod
    def error(message: str, status_code: int = 500, errors: Optional[Dict[str, Any]] = None) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content={
                "statusCode": status_code,
                "message": message,
                "errors": jsonable_encoder(errors or {}),
            },
        )
