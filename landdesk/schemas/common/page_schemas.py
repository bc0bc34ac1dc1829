from typing import Dict, Generic, List, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


# ==========================
# 💡 通用分页结构
# ==========================
class PaginationMeta(BaseModel):
    current_page: int
    total_pages: int
    total: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        total_pages = -(-total // limit) if limit > 0 else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total=total,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class RecordPage(BaseModel, Generic[T]):
    items: List[T]
    pagination: PaginationMeta
    counts: Dict[str, int]

    model_config = {
        "from_attributes": True
    }
