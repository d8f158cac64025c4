"""Pydantic schemas used as views in the MVC architecture."""

from .common import ErrorResponse, SuccessResponse, error_response, success_response
from .videos import ResourceList

__all__ = [
    "ErrorResponse",
    "ResourceList",
    "SuccessResponse",
    "error_response",
    "success_response",
]
