import pytest

from landdesk.core.exceptions import DeleteException, NotFoundException, PersistenceException
from landdesk.core.response_codes import ResponseCodeEnum
from landdesk.domain.record_kinds import MAPS_KIND, PROPERTY_KIND
from landdesk.enums.upload_enums import AttachmentKind, UploadStatus
from landdesk.schemas.uploads.upload_schemas import FileBlob, UploadBatch
from landdesk.services.uploads.status_reporter import UploadStatusReporter
from landdesk.services.uploads.upload_coordinator import UploadCoordinator
from tests.fakes import ScriptedObjectStore


def blob(name: str, size: int = 8) -> FileBlob:
    return FileBlob(filename=name, content_type=None, data=b"x" * size)


@pytest.fixture
def coordinator(property_store, object_store, cache, runner):
    return UploadCoordinator(PROPERTY_KIND, property_store, object_store, cache, runner)


async def test_submit_without_files_completes_before_returning(coordinator, property_store, property_draft):
    result = await coordinator.submit(property_draft, UploadBatch())

    assert result.upload_status == UploadStatus.COMPLETED
    assert result.immediate is True
    stored = await property_store.get_by_id(result.record.id)
    assert stored.upload_status == UploadStatus.COMPLETED.value
    assert stored.total_files == 0
    assert stored.uploaded_files == 0
    assert coordinator.runner.stats["submitted"] == 0


async def test_submit_returns_immediately_and_uploads_in_background(
    coordinator, property_store, object_store, runner, property_draft
):
    files = UploadBatch(images=[blob("a.jpg"), blob("b.jpg")], pdfs=[blob("deed.pdf")])

    result = await coordinator.submit(property_draft, files)

    assert result.upload_status == UploadStatus.UPLOADING
    assert result.record.total_files == 3
    assert result.record.images == []

    await runner.join()

    stored = await property_store.get_by_id(result.record.id)
    assert stored.upload_status == UploadStatus.COMPLETED.value
    assert stored.uploaded_files == 3
    assert [ref["original_name"] for ref in stored.images] == ["a.jpg", "b.jpg"]
    assert [ref["original_name"] for ref in stored.pdfs] == ["deed.pdf"]
    assert len(object_store.uploaded) == 3


async def test_failed_upload_is_skipped_and_others_complete(property_store, cache, runner, property_draft):
    object_store = ScriptedObjectStore(fail_uploads={"broken.jpg"})
    coordinator = UploadCoordinator(PROPERTY_KIND, property_store, object_store, cache, runner)
    files = UploadBatch(
        images=[blob("front.jpg"), blob("broken.jpg"), blob("side.jpg")],
        pdfs=[blob("survey.pdf")],
    )

    result = await coordinator.submit(property_draft, files)
    await runner.join()

    stored = await property_store.get_by_id(result.record.id)
    assert stored.upload_status == UploadStatus.COMPLETED.value
    assert stored.total_files == 4
    assert stored.uploaded_files == 3
    assert len(stored.images) == 2
    assert len(stored.pdfs) == 1

    status = await UploadStatusReporter(PROPERTY_KIND, property_store).get_status(result.record.id)
    assert status.progress_percent == 75


async def test_background_phase_never_exceeds_total(coordinator, property_store, property_draft):
    record = await property_store.create({**property_draft, "total_files": 1, "upload_status": "pending"})

    await coordinator.run_background_phase(record.id, UploadBatch(images=[blob("1.jpg"), blob("2.jpg")]))

    stored = await property_store.get_by_id(record.id)
    assert stored.uploaded_files == 1
    assert len(stored.images) == 2


async def test_unexpected_error_marks_record_failed(property_store, object_store, cache, runner, property_draft):
    original_update = property_store.update_by_id

    async def failing_final_write(record_id, data, return_updated=True):
        if "images" in data:
            raise PersistenceException()
        return await original_update(record_id, data, return_updated)

    property_store.update_by_id = failing_final_write
    coordinator = UploadCoordinator(PROPERTY_KIND, property_store, object_store, cache, runner)

    result = await coordinator.submit(property_draft, UploadBatch(images=[blob("a.jpg")]))
    await runner.join()

    stored = await property_store.get_by_id(result.record.id)
    assert stored.upload_status == UploadStatus.FAILED.value
    assert runner.stats["failed"] == 1
    assert runner.stats["succeeded"] == 0
    assert object_store.deleted == [ref.storage_id for ref in object_store.uploaded]


async def test_missing_record_in_background_phase_does_not_raise(coordinator, cache):
    await cache.get_or_compute("property:list", 60, _value("stale"))

    outcome = await coordinator.run_background_phase(
        "8f0b3f9e-0000-4000-8000-000000000000", UploadBatch(images=[blob("a.jpg")])
    )

    assert outcome == UploadStatus.FAILED
    assert await cache.backend.get("property:list") is None


async def test_resubmit_appends_and_accumulates_totals(coordinator, property_store, runner, property_draft):
    first = await coordinator.submit(property_draft, UploadBatch(images=[blob("old.jpg")]))
    await runner.join()

    second = await coordinator.resubmit(
        first.record.id,
        {"village": "Sanand", "upload_status": "completed", "uploaded_files": 99},
        UploadBatch(images=[blob("new.jpg")], pdfs=[blob("plan.pdf")]),
    )

    assert second.upload_status == UploadStatus.UPLOADING
    assert second.record.village == "Sanand"
    assert second.record.total_files == 3
    assert second.record.uploaded_files == 1

    await runner.join()

    stored = await property_store.get_by_id(first.record.id)
    assert stored.upload_status == UploadStatus.COMPLETED.value
    assert stored.uploaded_files == 3
    assert [ref["original_name"] for ref in stored.images] == ["old.jpg", "new.jpg"]
    assert [ref["original_name"] for ref in stored.pdfs] == ["plan.pdf"]


async def test_resubmit_without_files_keeps_upload_state(coordinator, property_draft):
    first = await coordinator.submit(property_draft, UploadBatch())

    result = await coordinator.resubmit(first.record.id, {"notes": "road widening planned"}, UploadBatch())

    assert result.upload_status == UploadStatus.COMPLETED
    assert result.record.notes == "road widening planned"
    assert coordinator.runner.stats["submitted"] == 0


async def test_resubmit_unknown_record(coordinator):
    with pytest.raises(NotFoundException):
        await coordinator.resubmit("8f0b3f9e-0000-4000-8000-000000000000", {}, UploadBatch())


async def test_delete_attachment_removes_reference(coordinator, property_store, object_store, runner, property_draft):
    result = await coordinator.submit(property_draft, UploadBatch(images=[blob("a.jpg"), blob("b.jpg")]))
    await runner.join()
    stored = await property_store.get_by_id(result.record.id)
    target = stored.images[0]["storage_id"]

    updated = await coordinator.delete_attachment(result.record.id, AttachmentKind.IMAGE, target)

    assert [ref["original_name"] for ref in updated.images] == ["b.jpg"]
    assert object_store.deleted == [target]


async def test_delete_attachment_tolerates_object_store_failure(property_store, cache, runner, property_draft):
    record = await property_store.create({
        **property_draft,
        "pdfs": [{"url": "u", "storage_id": "gone.pdf", "original_name": "gone.pdf"}],
    })
    coordinator = UploadCoordinator(
        PROPERTY_KIND, property_store, ScriptedObjectStore(fail_deletes={"gone.pdf"}), cache, runner
    )

    updated = await coordinator.delete_attachment(record.id, AttachmentKind.PDF, "gone.pdf")

    assert updated.pdfs == []


async def test_delete_attachment_unknown_storage_id(coordinator, property_draft):
    result = await coordinator.submit(property_draft, UploadBatch())

    with pytest.raises(NotFoundException) as exc_info:
        await coordinator.delete_attachment(result.record.id, AttachmentKind.IMAGE, "missing")
    assert exc_info.value.code == ResponseCodeEnum.FILE_NOT_FOUND.code


async def test_delete_record_releases_every_attachment(maps_store, cache, runner):
    object_store = ScriptedObjectStore(fail_deletes={"maps/pdfs/b.pdf"})
    coordinator = UploadCoordinator(MAPS_KIND, maps_store, object_store, cache, runner)
    record = await maps_store.create({
        "area": "Shela",
        "images": [{"url": "u", "storage_id": "maps/images/a.jpg", "original_name": "a.jpg"}],
        "pdfs": [{"url": "u", "storage_id": "maps/pdfs/b.pdf", "original_name": "b.pdf"}],
    })

    deleted = await coordinator.delete_record(record.id)

    assert deleted.id == record.id
    assert object_store.deleted == ["maps/images/a.jpg"]
    assert await maps_store.get_by_id(record.id) is None

    with pytest.raises(NotFoundException):
        await coordinator.delete_record(record.id)


async def _submit(coordinator, record, draft):
    await coordinator.submit(draft, UploadBatch())


async def _resubmit_fields(coordinator, record, draft):
    await coordinator.resubmit(record.id, {"notes": "revised"}, UploadBatch())


async def _resubmit_files(coordinator, record, draft):
    await coordinator.resubmit(record.id, {}, UploadBatch(pdfs=[blob("extra.pdf")]))


async def _delete_attachment(coordinator, record, draft):
    await coordinator.delete_attachment(record.id, AttachmentKind.IMAGE, record.images[0]["storage_id"])


async def _delete_record(coordinator, record, draft):
    await coordinator.delete_record(record.id)


async def _background_phase(coordinator, record, draft):
    await coordinator.run_background_phase(record.id, UploadBatch(images=[blob("late.jpg")]), append=True)


@pytest.mark.parametrize(
    "mutation",
    [_submit, _resubmit_fields, _resubmit_files, _delete_attachment, _delete_record, _background_phase],
)
async def test_every_mutation_flushes_cache(mutation, coordinator, property_store, cache, runner, property_draft):
    first = await coordinator.submit(property_draft, UploadBatch(images=[blob("a.jpg")]))
    await runner.join()
    record = await property_store.get_by_id(first.record.id)
    await cache.get_or_compute("property:list", 60, _value("stale"))
    await cache.get_or_compute(f"property:{record.id}", 60, _value("stale"))

    await mutation(coordinator, record, property_draft)

    assert await cache.backend.get("property:list") is None
    assert await cache.backend.get(f"property:{record.id}") is None


class StatusCheckingObjectStore(ScriptedObjectStore):
    """每次上传前记录一次 get_status 的结果。"""

    def __init__(self, reporter: UploadStatusReporter):
        super().__init__()
        self.reporter = reporter
        self.record_id = None
        self.seen = []

    async def upload(self, data, filename, kind):
        self.seen.append(await self.reporter.get_status(self.record_id))
        return await super().upload(data, filename, kind)


async def test_progress_is_visible_while_batch_uploads(property_store, cache, runner, property_draft):
    object_store = StatusCheckingObjectStore(UploadStatusReporter(PROPERTY_KIND, property_store))
    coordinator = UploadCoordinator(PROPERTY_KIND, property_store, object_store, cache, runner)
    record = await property_store.create({**property_draft, "total_files": 3, "upload_status": "pending"})
    object_store.record_id = record.id

    outcome = await coordinator.run_background_phase(
        record.id, UploadBatch(images=[blob("1.jpg"), blob("2.jpg")], pdfs=[blob("3.pdf")])
    )

    assert outcome == UploadStatus.COMPLETED
    assert [s.uploaded_files for s in object_store.seen] == [0, 1, 2]
    assert [s.progress_percent for s in object_store.seen] == [0, 33, 67]
    assert all(s.upload_status == UploadStatus.UPLOADING for s in object_store.seen)

    final = await UploadStatusReporter(PROPERTY_KIND, property_store).get_status(record.id)
    assert final.upload_status == UploadStatus.COMPLETED
    assert final.progress_percent == 100


class RecordDeletingObjectStore(ScriptedObjectStore):
    """第一次上传时把记录删掉，模拟上传途中的 delete_record。"""

    def __init__(self, record_store):
        super().__init__()
        self.record_store = record_store
        self.record_id = None

    async def upload(self, data, filename, kind):
        ref = await super().upload(data, filename, kind)
        if len(self.uploaded) == 1:
            await self.record_store.delete_by_id(self.record_id)
        return ref


async def test_uploads_for_record_deleted_mid_batch_are_released(property_store, cache, runner, property_draft):
    object_store = RecordDeletingObjectStore(property_store)
    coordinator = UploadCoordinator(PROPERTY_KIND, property_store, object_store, cache, runner)
    record = await property_store.create({**property_draft, "total_files": 3, "upload_status": "pending"})
    object_store.record_id = record.id

    outcome = await coordinator.run_background_phase(
        record.id, UploadBatch(images=[blob("a.jpg"), blob("b.jpg")], pdfs=[blob("c.pdf")])
    )

    assert outcome == UploadStatus.FAILED
    assert len(object_store.uploaded) == 3
    assert set(object_store.deleted) == {ref.storage_id for ref in object_store.uploaded}


async def test_orphan_release_tolerates_delete_failures(property_store, cache, runner, property_draft):
    object_store = RecordDeletingObjectStore(property_store)
    coordinator = UploadCoordinator(PROPERTY_KIND, property_store, object_store, cache, runner)
    record = await property_store.create({**property_draft, "total_files": 2, "upload_status": "pending"})
    object_store.record_id = record.id

    async def flaky_delete(storage_id, kind):
        if "a.jpg" in storage_id:
            raise DeleteException(storage_id=storage_id)
        object_store.deleted.append(storage_id)

    object_store.delete = flaky_delete

    outcome = await coordinator.run_background_phase(record.id, UploadBatch(images=[blob("a.jpg"), blob("b.jpg")]))

    assert outcome == UploadStatus.FAILED
    assert len(object_store.deleted) == 1
    assert object_store.deleted[0].endswith("-b.jpg")


async def test_failed_phase_is_counted_by_runner(coordinator, property_store, runner, property_draft):
    result = await coordinator.submit(property_draft, UploadBatch(images=[blob("a.jpg")]))
    await property_store.delete_by_id(result.record.id)

    await runner.join()

    assert runner.stats == {"submitted": 1, "succeeded": 0, "failed": 1, "pending": 0}


async def test_completed_phase_is_counted_by_runner(coordinator, runner, property_draft):
    await coordinator.submit(property_draft, UploadBatch(images=[blob("a.jpg")]))
    await runner.join()

    assert runner.stats == {"submitted": 1, "succeeded": 1, "failed": 0, "pending": 0}



def _value(value):
    async def compute():
        return value
    return compute
