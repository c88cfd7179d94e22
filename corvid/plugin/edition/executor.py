"""
Background executor running edition installations.
"""

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor

from corvid.log import get_logger

logger = get_logger(__name__)


class EditionInstallerExecutor:
    """
    Single worker thread for installation tasks.

    Tasks are fire-and-forget: the returned Future is available to callers
    that want it, and any exception raised by a task is logged.
    """

    def __init__(self):
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="edition-installer")

    def submit(self, task: Callable[[], None]) -> Future:
        future = self._pool.submit(task)
        future.add_done_callback(self._log_failure)
        return future

    @staticmethod
    def _log_failure(future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.opt(exception=error).error(f"Edition installation failed: {error}")

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
