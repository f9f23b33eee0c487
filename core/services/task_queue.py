"""Bounded worker pool for image service calls.

All identify/resize work of a run goes through one `TaskQueue`, so the cap
applies to the whole run and not per folder. Tasks start in submission order
and may finish in any order; a failing task only rejects its own future.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path
import threading
from types import TracebackType

from loguru import logger

from core.services.interfaces import IdentifyResult, IImageService

DEFAULT_CONCURRENCY = 5


class TaskQueue:
    """Dispatches image service calls to a fixed number of worker threads."""

    def __init__(self, service: IImageService, concurrency: int = DEFAULT_CONCURRENCY) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self._service = service
        self._concurrency = concurrency
        self._executor = ThreadPoolExecutor(
            max_workers=concurrency, thread_name_prefix="image-task"
        )
        self._lock = threading.Lock()
        self._pending: set[Future] = set()

    @property
    def concurrency(self) -> int:
        """Maximum number of tasks running at the same time."""
        return self._concurrency

    def identify(self, path: Path) -> Future[IdentifyResult]:
        """Queue an identify call for `path`."""
        return self._submit(self._service.identify, path)

    def resize(self, src: Path, dst: Path, size: int) -> Future[None]:
        """Queue a resize of `src` into `dst` bounded by `size`."""
        return self._submit(self._service.resize, src, dst, size)

    def join(self) -> None:
        """Block until every task submitted so far has finished."""
        while True:
            with self._lock:
                pending = {f for f in self._pending if not f.done()}
            if not pending:
                return
            logger.debug("Waiting for {} queued image task(s)", len(pending))
            wait(pending)

    def close(self) -> None:
        """Wait for outstanding tasks and stop the workers."""
        self._executor.shutdown(wait=True)

    def __enter__(self) -> TaskQueue:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _submit(self, fn, *args) -> Future:
        future = self._executor.submit(fn, *args)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._discard)
        return future

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
