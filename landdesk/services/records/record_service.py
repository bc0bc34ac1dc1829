# landdesk/services/records/record_service.py

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from landdesk.core.exceptions import NotFoundException, ValidationException
from landdesk.core.storage.record_store import RecordStoreInterface
from landdesk.domain.record_kinds import RecordKindSpec
from landdesk.enums.upload_enums import IN_FLIGHT_STATUSES
from landdesk.infra.cache.read_cache import ReadCache
from landdesk.schemas.common.page_schemas import PaginationMeta, RecordPage
from landdesk.services._base_service import BaseService


class RecordService(BaseService):
    """
    记录的读取与标记切换。读取结果经过 ReadCache；
    存在近期上传活动时先清空缓存，保证进度变化能被列表看到。
    """

    def __init__(
        self,
        kind: RecordKindSpec,
        record_store: RecordStoreInterface,
        cache: ReadCache,
        cache_ttl: int = 300,
        recent_activity_window_seconds: int = 120,
    ):
        super().__init__()
        self.kind = kind
        self.record_store = record_store
        self.cache = cache
        self.cache_ttl = cache_ttl
        self.recent_activity_window = timedelta(seconds=recent_activity_window_seconds)

    async def has_recent_activity(self) -> bool:
        since = datetime.now(timezone.utc) - self.recent_activity_window
        active = await self.record_store.count({
            "upload_status__in": [s.value for s in IN_FLIGHT_STATUSES],
            "updated_at__ge": since,
        })
        return active > 0

    async def list_records(
        self,
        page: int = 1,
        limit: int = 9,
        filters: Optional[Dict[str, Any]] = None,
        search: Optional[str] = None,
        bypass_cache: bool = False,
    ) -> Dict[str, Any]:
        page = max(page, 1)
        limit = max(limit, 1)
        filters = filters or {}

        if bypass_cache or await self.has_recent_activity():
            self.logger.debug(f"Flushing read cache before listing {self.kind.name}")
            await self.cache.invalidate_all()

        key = ReadCache.build_key(
            f"{self.kind.cache_prefix}:list",
            page=page,
            limit=limit,
            search=search.strip() if search and search.strip() else None,
            filters=filters or None,
        )

        async def compute() -> Dict[str, Any]:
            return await self._query_page(page, limit, filters, search)

        return await self.cache.get_or_compute(key, self.cache_ttl, compute)

    async def _query_page(self, page: int, limit: int, filters: Dict[str, Any], search: Optional[str]) -> Dict[str, Any]:
        query = self.kind.build_filters(self.kind.filter_schema(**filters))
        query.update(self.kind.build_search(search))

        items = await self.record_store.find(
            query, sort_by=["-created_at"], skip=(page - 1) * limit, limit=limit
        )
        total = await self.record_store.count(query)

        result = RecordPage(
            items=[self.kind.read_schema.model_validate(item) for item in items],
            pagination=PaginationMeta.build(page, limit, total),
            counts=await self._build_counts(filters),
        )
        return result.model_dump(mode="json")

    async def _build_counts(self, filters: Dict[str, Any]) -> Dict[str, int]:
        scope: Dict[str, Any] = {}
        if self.kind.count_within_recycle_scope and filters.get("recycle_bin") is not None:
            scope["recycle_bin__eq"] = filters["recycle_bin"]

        counts = {"all": await self.record_store.count(scope or None)}
        if self.kind.group_count_field:
            counts.update({value: 0 for value in self.kind.group_count_values})
            groups = await self.record_store.aggregate_group_count(self.kind.group_count_field, scope or None)
            for group in groups:
                if group["key"] in counts:
                    counts[group["key"]] = group["count"]
        return counts

    async def get_record(self, record_id: Any) -> Dict[str, Any]:
        key = f"{self.kind.cache_prefix}:{record_id}"

        async def compute() -> Dict[str, Any]:
            record = await self.record_store.get_by_id(record_id)
            if record is None:
                raise NotFoundException(f"{self.kind.name} not found")
            return self.kind.read_schema.model_validate(record).model_dump(mode="json")

        return await self.cache.get_or_compute(key, self.cache_ttl, compute)

    async def set_flag(self, record_id: Any, field: str, value: Any) -> Dict[str, Any]:
        if field not in self.kind.flag_fields:
            raise ValidationException(f"'{field}' cannot be toggled on {self.kind.name}")
        if not isinstance(value, bool):
            raise ValidationException(f"'{field}' must be a boolean value")

        record = await self.record_store.update_by_id(record_id, {field: value})
        if record is None:
            raise NotFoundException(f"{self.kind.name} not found")

        await self.cache.invalidate_all()
        self.logger.info(f"{self.kind.name} {record_id}: {field} -> {value}")
        return self.kind.read_schema.model_validate(record).model_dump(mode="json")
