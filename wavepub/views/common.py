"""Common response envelopes."""

from typing import Any, Generic, TypeVar

from fastapi.responses import JSONResponse
from pydantic import BaseModel

ResultT = TypeVar("ResultT")


class ErrorResponse(BaseModel):
    message: str = "Error"
    error: str


class SuccessResponse(BaseModel, Generic[ResultT]):
    message: str = "Success"
    result: ResultT


def success_response(result: Any, status_code: int = 200) -> JSONResponse:
    payload = SuccessResponse[Any](result=result)
    return JSONResponse(status_code=status_code, content=payload.model_dump(mode="json"))


def error_response(exc: BaseException | str, status_code: int) -> JSONResponse:
    payload = ErrorResponse(error=str(exc) or exc.__class__.__name__)
    return JSONResponse(status_code=status_code, content=payload.model_dump(mode="json"))
