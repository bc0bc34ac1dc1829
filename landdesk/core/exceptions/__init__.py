# landdesk/core/exceptions/__init__.py

from .base_exception import (
    BaseBusinessException,
    NotFoundException,
    ValidationException,
    PersistenceException,
)
from .upload_exceptions import (
    UploadException,
    DeleteException,
)

__all__ = [
    "BaseBusinessException",
    "NotFoundException",
    "ValidationException",
    "PersistenceException",

    "UploadException",
    "DeleteException",
]
