# Services package - business logic and storage
from charsheet.services.backup import BackupService
from charsheet.services.images import ImageService
from charsheet.services.session_recorder import SessionRecorder
from charsheet.services.storage import StorageService

__all__ = [
    "BackupService",
    "ImageService",
    "SessionRecorder",
    "StorageService",
]
