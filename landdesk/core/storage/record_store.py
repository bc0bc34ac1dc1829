from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class RecordStoreInterface(ABC):
    """
    记录持久化接口。
    过滤条件使用 `field__op` 语法 (eq, ne, lt, le, gt, ge, in, not_in, like, ilike, is_null)，
    另可传入 `__or__` 子字典表示 OR 组合。
    """

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> Any:
        pass

    @abstractmethod
    async def get_by_id(self, record_id: Any) -> Optional[Any]:
        pass

    @abstractmethod
    async def update_by_id(self, record_id: Any, data: Dict[str, Any], return_updated: bool = True) -> Optional[Any]:
        """返回更新后的记录；记录不存在时返回 None。"""
        pass

    @abstractmethod
    async def delete_by_id(self, record_id: Any) -> Optional[Any]:
        """返回被删除的记录；记录不存在时返回 None。"""
        pass

    @abstractmethod
    async def find(
        self,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[List[str]] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Any]:
        pass

    @abstractmethod
    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        pass

    @abstractmethod
    async def aggregate_group_count(self, field: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """按字段分组计数，返回 [{"key": value, "count": n}, ...]。"""
        pass
