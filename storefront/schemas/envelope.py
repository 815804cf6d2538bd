"""Uniform response envelope returned by every route."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")


class Envelope(BaseModel):
    """Every response carries success and message; clients branch on success."""

    success: bool = Field(default=True, description="Whether the operation succeeded")
    message: str = Field(..., description="Human-readable outcome")


class DataEnvelope(Envelope, Generic[DataT]):
    """Envelope with a data payload."""

    data: DataT
