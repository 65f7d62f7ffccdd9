# vehicle_booking/schemas/pagination.py
from pydantic import BaseModel
from typing import Generic, List, TypeVar

T = TypeVar("T")


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class Page(BaseModel, Generic[T]):
    items: List[T]
    pagination: Pagination
