import re
import uuid

from sqlalchemy.orm import declared_attr
from sqlmodel import SQLModel, Field

from landdesk.models.base.attachment_mixin import AttachmentTrackingMixin
from landdesk.models.base.timestamp_mixin import TimestampMixin


def camel_to_snake(name: str) -> str:
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


class AutoTableNameMixin:
    @declared_attr
    def __tablename__(cls):
        return camel_to_snake(cls.__name__)


class IdMixin(SQLModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)


class BaseModel(
    AutoTableNameMixin,
    AttachmentTrackingMixin,
    TimestampMixin,
    IdMixin,
):
    __abstract__ = True
