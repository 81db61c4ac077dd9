from typing import Generic, TypeVar, List, Optional
from pydantic import BaseModel

T = TypeVar("T")

class StandardResponse(BaseModel, Generic[T]):
    """Standard API response envelope."""
    status: str = "success"
    data: Optional[T] = None
    message: Optional[str] = None

class CollectionResponse(BaseModel, Generic[T]):
    """Unpaginated collection envelope."""
    data: List[T]
    total: int
    status: str = "success"
