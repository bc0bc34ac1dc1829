import io
import mimetypes
import os
import uuid

from starlette.concurrency import run_in_threadpool
from tenacity import RetryError, retry, stop_after_attempt, wait_fixed

from landdesk.core.exceptions import DeleteException, UploadException
from landdesk.core.logger import logger
from landdesk.core.storage.object_store import ObjectStoreInterface
from landdesk.enums.upload_enums import AttachmentKind
from landdesk.infra.storage.storage_interface import StorageClientInterface
from landdesk.schemas.uploads.upload_schemas import AttachmentRef

DEFAULT_CONTENT_TYPES = {
    AttachmentKind.IMAGE: "application/octet-stream",
    AttachmentKind.PDF: "application/pdf",
}


class S3ObjectStore(ObjectStoreInterface):
    """
    按记录类型划分的附件存储：对象 key 为 `{folder}/{images|pdfs}/{uuid}{ext}`。
    storage_id 即对象 key。
    """

    def __init__(self, client: StorageClientInterface, folder: str, delete_wait_seconds: float = 0.5):
        self.client = client
        self.folder = folder.strip("/")
        self.delete_wait_seconds = delete_wait_seconds

    def build_object_key(self, filename: str, kind: AttachmentKind) -> str:
        ext = os.path.splitext(filename or "")[1].lower()
        return f"{self.folder}/{kind.folder}/{uuid.uuid4().hex}{ext}"

    async def upload(self, data: bytes, filename: str, kind: AttachmentKind) -> AttachmentRef:
        object_key = self.build_object_key(filename, kind)
        content_type = mimetypes.guess_type(filename or "")[0] or DEFAULT_CONTENT_TYPES[kind]

        try:
            await run_in_threadpool(
                self.client.put_object,
                object_key,
                io.BytesIO(data),
                len(data),
                content_type,
            )
        except Exception as e:
            logger.error(f"Upload of '{filename}' to '{object_key}' failed: {e}")
            raise UploadException(message=f"文件上传失败: {filename}", filename=filename) from e

        return AttachmentRef(
            url=self.client.build_final_url(object_key),
            storage_id=object_key,
            original_name=filename,
        )

    async def delete(self, storage_id: str, kind: AttachmentKind) -> None:
        @retry(stop=stop_after_attempt(3), wait=wait_fixed(self.delete_wait_seconds))
        async def _remove():
            await run_in_threadpool(self.client.remove_object, storage_id)

        try:
            await _remove()
        except RetryError as e:
            cause = e.last_attempt.exception()
            logger.error(f"Delete of {kind.value} '{storage_id}' failed after retries: {cause}")
            raise DeleteException(message=f"文件删除失败: {storage_id}", storage_id=storage_id) from cause
        logger.info(f"Deleted {kind.value} object '{storage_id}'")
