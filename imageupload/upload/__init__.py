from imageupload.upload.base import BaseUploadAdapter
from imageupload.upload.factory import UploadAdapterFactory
from imageupload.upload.file_repository import FileRepository
from imageupload.upload.loader import FileLoader
from imageupload.upload.models import FileObject, LoaderStatus

__all__ = [
    "BaseUploadAdapter",
    "FileLoader",
    "FileObject",
    "FileRepository",
    "LoaderStatus",
    "UploadAdapterFactory",
]
