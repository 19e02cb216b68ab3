from typing import Generic, TypeVar
from pydantic import BaseModel

T = TypeVar("T")

class Envelope(BaseModel, Generic[T]):
    """Successful response body: {"data": ...}."""
    data: T

class ErrorEnvelope(BaseModel):
    error: str

class Success(BaseModel):
    success: bool = True
