"""Shared response wrappers."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Success envelope: every payload is returned under ``data``."""

    data: T


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str
