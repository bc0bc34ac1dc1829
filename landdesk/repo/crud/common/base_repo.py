import operator
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import asc, delete, desc, func, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import SQLModel, select

from landdesk.core.exceptions import PersistenceException
from landdesk.core.logger import get_logger
from landdesk.core.storage.record_store import RecordStoreInterface

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=SQLModel)

OPERATOR_MAP = {
    'eq': operator.eq,          # 等于: field__eq=value
    'ne': operator.ne,          # 不等于
    'lt': operator.lt,          # 小于
    'le': operator.le,          # 小于等于
    'gt': operator.gt,          # 大于
    'ge': operator.ge,          # 大于等于
    'in': 'in_',                # 包含于: field__in=[v1, v2]
    'not_in': 'not_in',         # 不包含于
    'like': 'like',             # 模糊查询 (区分大小写)
    'ilike': 'ilike',           # 模糊查询 (不区分大小写): field__ilike=value
    'is_null': lambda c, v: c.is_(None) if v else c.isnot(None),  # 是否为NULL
}


def _coerce_id(record_id: Any) -> Optional[uuid.UUID]:
    if isinstance(record_id, uuid.UUID):
        return record_id
    try:
        return uuid.UUID(str(record_id))
    except (TypeError, ValueError):
        return None


class SqlRecordStore(RecordStoreInterface, Generic[ModelType]):
    """
    基于 SQLModel / SQLAlchemy AsyncSession 的 Record Store。
    每个操作使用独立的会话，写操作各自提交，后台任务与请求互不共享会话。
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], model: Type[ModelType]):
        self.session_factory = session_factory
        self.model = model

    # ==========================
    # 数据创建方法 (Create)
    # ==========================

    async def create(self, data: Dict[str, Any]) -> ModelType:
        db_obj = self.model(**data)
        async with self._session("create") as session:
            session.add(db_obj)
            await session.commit()
            await session.refresh(db_obj)
        return db_obj

    # ==========================
    # 数据更新方法 (Update)
    # ==========================

    async def update_by_id(self, record_id: Any, data: Dict[str, Any], return_updated: bool = True) -> Optional[ModelType]:
        """
        根据ID直接更新数据库记录 (Direct Update 模式)，并自动刷新 updated_at。
        不依赖 RETURNING 子句，在同一会话中重新查询更新后的对象。
        """
        pk = _coerce_id(record_id)
        if pk is None:
            return None

        values = dict(data)
        if hasattr(self.model, "updated_at"):
            values["updated_at"] = datetime.now(timezone.utc)

        async with self._session("update_by_id") as session:
            stmt = (
                update(self.model)
                .where(self.model.id == pk)
                .values(**values)
            )
            result = await session.execute(stmt)
            await session.commit()
            if result.rowcount == 0:
                return None
            if not return_updated:
                return None
            return await session.get(self.model, pk, populate_existing=True)

    # ==========================
    # 数据删除方法 (Delete)
    # ==========================

    async def delete_by_id(self, record_id: Any) -> Optional[ModelType]:
        pk = _coerce_id(record_id)
        if pk is None:
            return None

        async with self._session("delete_by_id") as session:
            db_obj = await session.get(self.model, pk)
            if db_obj is None:
                return None
            await session.execute(delete(self.model).where(self.model.id == pk))
            await session.commit()
        return db_obj

    # ==========================
    # 数据查询方法 (Query)
    # ==========================

    async def get_by_id(self, record_id: Any) -> Optional[ModelType]:
        pk = _coerce_id(record_id)
        if pk is None:
            return None
        stmt = select(self.model).where(self.model.id == pk)
        async with self._session("get_by_id") as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def find(
        self,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[List[str]] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[ModelType]:
        stmt = self._apply_dynamic_filters(select(self.model), filters)
        stmt = self.apply_ordering(stmt, sort_by or [])
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self._session("find") as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        stmt = self._apply_dynamic_filters(select(self.model), filters)
        count_stmt = select(func.count()).select_from(stmt.subquery())
        async with self._session("count") as session:
            result = await session.execute(count_stmt)
            return result.scalar_one_or_none() or 0

    async def aggregate_group_count(self, field: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        column = getattr(self.model, field, None)
        if column is None:
            raise ValueError(f"Unknown group field: {field}")
        stmt = self._apply_dynamic_filters(select(column, func.count()), filters)
        stmt = stmt.select_from(self.model).group_by(column)
        async with self._session("aggregate_group_count") as session:
            result = await session.execute(stmt)
            return [{"key": key, "count": count} for key, count in result.all()]

    # ==========================
    # 内部工具
    # ==========================

    def _session(self, method: str) -> "_GuardedSession":
        return _GuardedSession(self.session_factory, f"{self.model.__name__}.{method}")

    def apply_ordering(self, stmt, order_by: List[str]):
        if not order_by:
            return stmt.order_by(desc(self.model.created_at))  # 默认排序

        for sort_field in order_by:
            order_func = asc
            if sort_field.startswith('-'):
                sort_field = sort_field[1:]
                order_func = desc

            column = getattr(self.model, sort_field, None)
            if column is not None:
                stmt = stmt.order_by(order_func(column))
        return stmt

    def _build_condition(self, key: str, value: Any):
        """根据 key 和 value 构建单个查询条件。"""
        parts = key.split('__')
        field_name = parts[0]
        op_name = parts[1] if len(parts) > 1 else 'eq'

        column = getattr(self.model, field_name, None)
        if column is None:
            logger.warning(f"Ignored invalid filter field: {field_name}")
            return None

        op_func = OPERATOR_MAP.get(op_name)
        if op_func is None:
            logger.warning(f"Ignored invalid filter operator: {op_name}")
            return None

        if isinstance(op_func, str):
            # like / ilike 自动添加通配符
            if op_name in ('like', 'ilike'):
                return getattr(column, op_func)(f"%{value}%")
            return getattr(column, op_func)(value)
        return op_func(column, value)

    def _apply_dynamic_filters(self, stmt, filters: Optional[Dict[str, Any]]):
        if not filters:
            return stmt

        and_conditions_data = dict(filters)
        or_conditions_data = and_conditions_data.pop('__or__', {})

        for key, value in and_conditions_data.items():
            if value is None or value == '':
                continue
            condition = self._build_condition(key, value)
            if condition is not None:
                stmt = stmt.where(condition)

        if or_conditions_data:
            or_clauses = []
            for key, value in or_conditions_data.items():
                if value is None or value == '':
                    continue
                condition = self._build_condition(key, value)
                if condition is not None:
                    or_clauses.append(condition)

            if or_clauses:
                stmt = stmt.where(or_(*or_clauses))

        return stmt


class _GuardedSession:
    """打开一个会话；SQLAlchemy 异常回滚后转换为 PersistenceException。"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], label: str):
        self._session_factory = session_factory
        self._label = label
        self._session: Optional[AsyncSession] = None

    async def __aenter__(self) -> AsyncSession:
        self._session = self._session_factory()
        return self._session

    async def __aexit__(self, exc_type, exc, tb):
        try:
            if exc is not None:
                await self._session.rollback()
        finally:
            await self._session.close()

        if isinstance(exc, SQLAlchemyError):
            logger.error(f"[{self._label}] Failed: {exc}")
            raise PersistenceException() from exc
        return False
