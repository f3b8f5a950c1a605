"""
PlaceShare Backend: Resource Cleaner
====================================

What:  Best-effort removal of uploaded image files.
When:  (a) a create attempt failed after its image was already stored;
       (b) a place was deleted and its database transaction committed.
How:   `release()` schedules an asyncio task and returns immediately. The
       task removes the file with aiofiles.os; a missing file is a no-op and
       any other failure is logged and dropped. Nothing is retried, and the
       outcome of the request that triggered the cleanup never depends on it.

The database commit and the file removal are two independent units of work.
A failed removal leaves an orphaned file on disk, nothing more.
"""

import asyncio
import logging
from typing import Set

import aiofiles.os

from placeshare.services.file_service import FileService

logger = logging.getLogger(__name__)


class ResourceCleaner:
    def __init__(self, file_service: FileService):
        self.file_service = file_service
        # Strong references so scheduled tasks are not garbage-collected mid-flight
        self._pending: Set[asyncio.Task] = set()

    def release(self, image_path: str) -> asyncio.Task:
        """Schedule removal of `image_path` (public path) and return at once."""
        task = asyncio.create_task(self._remove(image_path))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        logger.debug("Scheduled cleanup of %s", image_path)
        return task

    async def _remove(self, image_path: str) -> None:
        try:
            path = self.file_service.resolve(image_path)
            if not await aiofiles.os.path.exists(path):
                logger.debug("Cleanup: file already gone: %s", path.name)
                return
            await aiofiles.os.remove(path)
            logger.info("Cleaned up file: %s", path.name)
        except Exception as e:
            logger.warning("Failed to clean up file %s: %s", image_path, str(e))

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every scheduled cleanup; used at shutdown and in tests."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
