from __future__ import annotations

from pathlib import Path
import threading
import time
from unittest.mock import MagicMock

import pytest

from core.errors import ImageMetadataError
from core.services.interfaces import IdentifyResult
from core.services.task_queue import TaskQueue


class SlowService:
    """Tracks how many calls run at the same time."""

    def __init__(self) -> None:
        self.running = 0
        self.peak = 0
        self.started: list[str] = []
        self._lock = threading.Lock()

    def identify(self, path: Path) -> IdentifyResult:
        with self._lock:
            self.running += 1
            self.peak = max(self.peak, self.running)
            self.started.append(Path(path).name)
        time.sleep(0.02)
        with self._lock:
            self.running -= 1
        return IdentifyResult(width=1, height=1)

    def resize(self, src: Path, dst: Path, size: int) -> None:
        self.identify(src)


def test_rejects_non_positive_concurrency() -> None:
    with pytest.raises(ValueError):
        TaskQueue(MagicMock(), concurrency=0)


def test_concurrency_cap_is_respected() -> None:
    service = SlowService()

    with TaskQueue(service, concurrency=2) as queue:
        futures = [queue.identify(Path(f"{i}.jpg")) for i in range(8)]
        futures += [queue.resize(Path(f"r{i}.jpg"), Path("out.jpg"), 10) for i in range(4)]
        queue.join()

    assert all(f.done() for f in futures)
    assert 1 <= service.peak <= 2


def test_tasks_start_in_submission_order() -> None:
    service = SlowService()

    with TaskQueue(service, concurrency=1) as queue:
        for i in range(5):
            queue.identify(Path(f"{i}.jpg"))
        queue.join()

    assert service.started == [f"{i}.jpg" for i in range(5)]


def test_failure_only_rejects_its_own_future() -> None:
    service = MagicMock()
    service.identify.side_effect = [
        ImageMetadataError("broken"),
        IdentifyResult(width=2, height=3),
    ]

    with TaskQueue(service, concurrency=1) as queue:
        bad = queue.identify(Path("bad.jpg"))
        good = queue.identify(Path("good.jpg"))
        queue.join()

    with pytest.raises(ImageMetadataError):
        bad.result()
    assert good.result() == IdentifyResult(width=2, height=3)


def test_join_without_tasks_returns() -> None:
    with TaskQueue(MagicMock(), concurrency=3) as queue:
        queue.join()

    assert queue.concurrency == 3
