"""Upload coordinator - issues URLs and writes files to storage."""
import asyncio
import logging
from typing import Optional

from ..errors import MuroomError
from ..models import UploadItem, UploadSet, UploadState
from ..protocols import IStorageWriter, IUploadUrlIssuer
from ..utils.events import BATCH_COMPLETE, ITEM_COMPLETE, ITEM_FAIL, ITEM_START, EventEmitter
from .models import UploadBatchResult

logger = logging.getLogger(__name__)


def _describe_exception(exc: Exception) -> str:
    message = str(exc).strip()
    if message:
        return message
    return f"{type(exc).__name__}: {repr(exc)}"


class UploadCoordinator:
    """
    Uploads selected files through pre-signed URLs.

    Per file: one URL request, then one direct PUT. Files upload
    concurrently (bounded by ``max_parallel``) and the call returns only
    after every upload has settled. Items already uploaded are skipped,
    so a retry only touches pending and failed files.
    """

    def __init__(
        self,
        issuer: IUploadUrlIssuer,
        storage: IStorageWriter,
        max_parallel: int = 4,
        events: Optional[EventEmitter] = None,
    ):
        self._issuer = issuer
        self._storage = storage
        self._max_parallel = max(1, max_parallel)
        self.events = events or EventEmitter()

    async def upload_all(self, uploads: UploadSet) -> UploadBatchResult:
        """Upload every pending or failed item of the set."""
        items = list(uploads)
        in_flight = [item for item in items if item.state == UploadState.IN_FLIGHT]
        if in_flight:
            raise RuntimeError(f"{len(in_flight)} upload(s) already in flight")

        result = UploadBatchResult()
        result.skipped = [item for item in items if item.succeeded]
        result.attempted = [item for item in items if item.needs_upload]

        logger.info(
            f"Starting upload: {len(result.attempted)} file(s), "
            f"{len(result.skipped)} already uploaded, max {self._max_parallel} parallel"
        )

        semaphore = asyncio.Semaphore(self._max_parallel)
        total = len(result.attempted)
        await asyncio.gather(
            *(
                self._upload_one(item, semaphore, index, total)
                for index, item in enumerate(result.attempted, 1)
            )
        )

        for item in result.attempted:
            (result.succeeded if item.succeeded else result.failed).append(item)

        logger.info(
            f"File uploads complete: {len(result.succeeded)} successful, {len(result.failed)} failed"
        )
        await self.events.emit(BATCH_COMPLETE, result)
        return result

    async def _upload_one(
        self,
        item: UploadItem,
        semaphore: asyncio.Semaphore,
        index: int,
        total: int,
    ) -> None:
        async with semaphore:
            item.mark_in_flight()
            await self.events.emit(ITEM_START, item)
            logger.debug(f"[{index}/{total}] Uploading {item.category.value}: {item.file.name}")

            try:
                issued = await self._issuer.request_upload_url(
                    item.file.name, item.category, item.file.content_type
                )
                await self._storage.put(
                    issued.write_url,
                    item.file.data,
                    item.file.content_type,
                    file_name=item.file.name,
                )
            except asyncio.CancelledError:
                item.mark_failed("upload cancelled")
                logger.warning(f"[{index}/{total}] Cancelled: {item.file.name}")
                raise
            except MuroomError as exc:
                item.mark_failed(str(exc))
                logger.warning(f"[{index}/{total}] Failed: {item.file.name}: {exc}")
                await self.events.emit(ITEM_FAIL, item)
                return
            except Exception as exc:
                item.mark_failed(_describe_exception(exc))
                logger.exception(f"[{index}/{total}] Unexpected error uploading {item.file.name}")
                await self.events.emit(ITEM_FAIL, item)
                return

            item.mark_succeeded(issued.object_key)
            logger.info(f"[{index}/{total}] Uploaded {item.file.name} -> {issued.object_key}")
            await self.events.emit(ITEM_COMPLETE, item)
