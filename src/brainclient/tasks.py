"""Task submitters for fire-and-forget sends.

The client never runs background work on its own; ``send_async`` hands a
zero-argument callable to a TaskSubmitter supplied by the host application
(a Celery/RQ adapter, an executor, ...). Two simple implementations ship
with the client.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class TaskSubmitter(Protocol):
    """Anything that can run a callable out of band."""

    def submit(self, task: Callable[[], object]) -> None: ...


class InlineTaskSubmitter:
    """Runs the task immediately on the caller's thread (tests, scripts)."""

    def submit(self, task: Callable[[], object]) -> None:
        try:
            task()
        except Exception as e:
            logger.error("Brain background task failed: %s", e)


class ThreadPoolTaskSubmitter:
    """Runs tasks on a small thread pool owned by the submitter.

    Workers are not daemon threads: pending tasks are joined at interpreter exit.
    """

    def __init__(self, max_workers: int = 2, thread_name_prefix: str = "brainclient") -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=thread_name_prefix)

    def submit(self, task: Callable[[], object]) -> None:
        future = self._executor.submit(task)
        future.add_done_callback(self._log_failure)

    @staticmethod
    def _log_failure(future: Future) -> None:
        if future.cancelled():
            return
        error: Optional[BaseException] = future.exception()
        if error is not None:
            logger.error("Brain background task failed: %s", error)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


__all__ = ["TaskSubmitter", "InlineTaskSubmitter", "ThreadPoolTaskSubmitter"]
