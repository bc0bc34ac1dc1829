# landdesk/services/uploads/upload_coordinator.py

import asyncio
from typing import Any, Dict, List, Tuple

from landdesk.core.exceptions import DeleteException, NotFoundException, UploadException
from landdesk.core.response_codes import ResponseCodeEnum
from landdesk.core.storage.object_store import ObjectStoreInterface
from landdesk.core.storage.record_store import RecordStoreInterface
from landdesk.domain.record_kinds import RecordKindSpec
from landdesk.enums.upload_enums import AttachmentKind, UploadStatus
from landdesk.infra.cache.read_cache import ReadCache
from landdesk.infra.tasks.runner import BackgroundTaskRunner
from landdesk.schemas.uploads.upload_schemas import FileBlob, SubmitResult, UploadBatch
from landdesk.services._base_service import BaseService

# 调用方永远不能直接写入的上传跟踪字段
TRACKING_FIELDS = frozenset({"images", "pdfs", "upload_status", "total_files", "uploaded_files"})


class UploadCoordinator(BaseService):
    """
    带附件记录的写入流程：
    同步阶段创建/更新记录并立即返回，附件由后台阶段逐个上传到对象存储，
    完成后一次性写回附件列表与进度。
    """

    def __init__(
        self,
        kind: RecordKindSpec,
        record_store: RecordStoreInterface,
        object_store: ObjectStoreInterface,
        cache: ReadCache,
        runner: BackgroundTaskRunner,
    ):
        super().__init__()
        self.kind = kind
        self.record_store = record_store
        self.object_store = object_store
        self.cache = cache
        self.runner = runner

    # ==========================
    # 同步阶段
    # ==========================

    async def submit(self, draft: Dict[str, Any], files: UploadBatch) -> SubmitResult:
        total = files.total
        data = {k: v for k, v in draft.items() if k not in TRACKING_FIELDS}
        data.update(
            images=[],
            pdfs=[],
            upload_status=UploadStatus.PENDING.value,
            total_files=total,
            uploaded_files=0,
        )

        record = await self.record_store.create(data)
        self.logger.info(f"📝 {self.kind.name} {record.id} created with {total} file(s) to upload")

        if total == 0:
            record = await self.record_store.update_by_id(
                record.id, {"upload_status": UploadStatus.COMPLETED.value}
            ) or record

        await self.cache.invalidate_all()

        if total > 0:
            self._enqueue(record.id, files, append=False)
            return SubmitResult(record=record, upload_status=UploadStatus.UPLOADING)
        return SubmitResult(record=record, upload_status=UploadStatus.COMPLETED)

    async def resubmit(self, record_id: Any, update_fields: Dict[str, Any], files: UploadBatch) -> SubmitResult:
        existing = await self.record_store.get_by_id(record_id)
        if existing is None:
            raise NotFoundException(f"{self.kind.name} not found")

        await self.cache.invalidate_all()

        data = {k: v for k, v in update_fields.items() if k not in TRACKING_FIELDS}
        new_files = files.total
        if new_files > 0:
            data["upload_status"] = UploadStatus.UPLOADING.value
            data["total_files"] = existing.total_files + new_files

        record = existing
        if data:
            record = await self.record_store.update_by_id(existing.id, data)
            if record is None:
                raise NotFoundException(f"{self.kind.name} not found")

        await self.cache.invalidate_all()

        if new_files > 0:
            self.logger.info(f"📎 {self.kind.name} {existing.id}: appending {new_files} file(s)")
            self._enqueue(existing.id, files, append=True)
            return SubmitResult(record=record, upload_status=UploadStatus.UPLOADING)
        return SubmitResult(record=record, upload_status=UploadStatus(record.upload_status))

    async def delete_attachment(self, record_id: Any, kind: AttachmentKind, storage_id: str) -> Any:
        record = await self.record_store.get_by_id(record_id)
        if record is None:
            raise NotFoundException(f"{self.kind.name} not found")

        refs: List[Dict[str, Any]] = list(getattr(record, kind.list_field) or [])
        remaining = [ref for ref in refs if ref.get("storage_id") != storage_id]
        if len(remaining) == len(refs):
            raise NotFoundException("File not found", code_enum=ResponseCodeEnum.FILE_NOT_FOUND)

        try:
            await self.object_store.delete(storage_id, kind)
        except DeleteException as e:
            self.logger.warning(f"Object delete failed for {storage_id}, removing reference anyway: {e}")

        updated = await self.record_store.update_by_id(record.id, {kind.list_field: remaining})
        if updated is None:
            raise NotFoundException(f"{self.kind.name} not found")

        await self.cache.invalidate_all()
        return updated

    async def delete_record(self, record_id: Any) -> Any:
        record = await self.record_store.get_by_id(record_id)
        if record is None:
            raise NotFoundException(f"{self.kind.name} not found")

        targets: List[Tuple[str, AttachmentKind]] = [
            (ref["storage_id"], AttachmentKind.IMAGE) for ref in record.images or []
        ] + [
            (ref["storage_id"], AttachmentKind.PDF) for ref in record.pdfs or []
        ]
        if targets:
            results = await asyncio.gather(
                *(self.object_store.delete(sid, kind) for sid, kind in targets),
                return_exceptions=True,
            )
            for (sid, _), result in zip(targets, results):
                if isinstance(result, Exception):
                    self.logger.warning(f"Object delete failed for {sid} while deleting {record.id}: {result}")

        deleted = await self.record_store.delete_by_id(record.id)
        if deleted is None:
            raise NotFoundException(f"{self.kind.name} not found")

        await self.cache.invalidate_all()
        self.logger.info(f"🗑️ {self.kind.name} {record.id} deleted with {len(targets)} attachment(s)")
        return deleted

    # ==========================
    # 后台阶段
    # ==========================

    def _enqueue(self, record_id: Any, files: UploadBatch, append: bool) -> None:
        self.runner.submit(
            f"{self.kind.name}:{record_id}:upload",
            lambda: self._background_job(record_id, files, append),
        )

    async def _background_job(self, record_id: Any, files: UploadBatch, append: bool) -> None:
        # 让执行器把失败的上传阶段计入 failed
        outcome = await self.run_background_phase(record_id, files, append)
        if outcome is UploadStatus.FAILED:
            raise UploadException(message=f"{self.kind.name} {record_id} upload phase failed")

    async def run_background_phase(self, record_id: Any, files: UploadBatch, append: bool = False) -> UploadStatus:
        """
        逐个上传附件并更新进度。单个文件失败只记录并跳过；
        其他异常把记录标记为 failed，并删除本批已上传但未写回记录的对象。
        本方法从不抛出异常，返回 COMPLETED 或 FAILED，结束时总会清空读缓存。
        """
        mode = "append" if append else "initial"
        new_refs: Dict[AttachmentKind, List[Dict[str, Any]]] = {
            AttachmentKind.IMAGE: [],
            AttachmentKind.PDF: [],
        }
        try:
            record = await self.record_store.get_by_id(record_id)
            if record is None:
                raise LookupError(f"{self.kind.name} {record_id} disappeared before upload")

            await self.record_store.update_by_id(
                record_id, {"upload_status": UploadStatus.UPLOADING.value}, return_updated=False
            )

            uploaded = record.uploaded_files
            total = record.total_files

            for kind, blob in self._iter_files(files):
                ref = await self._upload_one(blob, kind)
                if ref is None:
                    continue
                new_refs[kind].append(ref)
                uploaded = min(uploaded + 1, total)
                await self.record_store.update_by_id(
                    record_id, {"uploaded_files": uploaded}, return_updated=False
                )

            latest = await self.record_store.get_by_id(record_id)
            if latest is None:
                raise LookupError(f"{self.kind.name} {record_id} disappeared during upload")

            await self.record_store.update_by_id(
                record_id,
                {
                    "upload_status": UploadStatus.COMPLETED.value,
                    "uploaded_files": min(uploaded, latest.total_files),
                    "images": list(latest.images or []) + new_refs[AttachmentKind.IMAGE],
                    "pdfs": list(latest.pdfs or []) + new_refs[AttachmentKind.PDF],
                },
                return_updated=False,
            )
            self.logger.info(
                f"✅ {self.kind.name} {record_id} {mode} upload finished: "
                f"{uploaded}/{latest.total_files} file(s) stored"
            )
            return UploadStatus.COMPLETED
        except Exception as e:
            self.logger.opt(exception=e).error(f"❌ {self.kind.name} {record_id} {mode} upload failed: {e}")
            await self._mark_failed(record_id)
            await self._release_orphans(record_id, new_refs)
            return UploadStatus.FAILED
        finally:
            await self.cache.invalidate_all()

    @staticmethod
    def _iter_files(files: UploadBatch):
        for blob in files.images:
            yield AttachmentKind.IMAGE, blob
        for blob in files.pdfs:
            yield AttachmentKind.PDF, blob

    async def _upload_one(self, blob: FileBlob, kind: AttachmentKind):
        try:
            ref = await self.object_store.upload(blob.data, blob.filename, kind)
        except Exception as e:
            self.logger.warning(f"Skipping {kind.value} '{blob.filename}': {e}")
            return None
        return ref.model_dump()

    async def _release_orphans(self, record_id: Any, new_refs: Dict[AttachmentKind, List[Dict[str, Any]]]) -> None:
        # 这些对象没有写回记录，之后无法再通过记录找到它们
        targets = [(ref["storage_id"], kind) for kind, refs in new_refs.items() for ref in refs]
        if not targets:
            return
        results = await asyncio.gather(
            *(self.object_store.delete(sid, kind) for sid, kind in targets),
            return_exceptions=True,
        )
        for (sid, _), result in zip(targets, results):
            if isinstance(result, Exception):
                self.logger.warning(f"Object delete failed for {sid} after {self.kind.name} {record_id} upload failed: {result}")
        self.logger.info(f"🧹 Released {len(targets)} orphaned object(s) for {self.kind.name} {record_id}")

    async def _mark_failed(self, record_id: Any) -> None:
        try:
            await self.record_store.update_by_id(
                record_id, {"upload_status": UploadStatus.FAILED.value}, return_updated=False
            )
        except Exception as e:
            self.logger.error(f"Could not mark {self.kind.name} {record_id} as failed: {e}")
