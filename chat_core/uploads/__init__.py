"""File upload module."""

from .object_storage import CloudinaryStorage, IObjectStorage, sign_params
from .service import UploadItem, UploadReport, UploadResult, UploadService

__all__ = [
    "CloudinaryStorage",
    "IObjectStorage",
    "sign_params",
    "UploadItem",
    "UploadReport",
    "UploadResult",
    "UploadService",
]
