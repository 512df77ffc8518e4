"""Runs one retrieval task per batch on a bounded thread pool."""

import logging
import threading
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Callable, Iterable, List, Optional, Set

from common.constants import DEFAULT_THREADS
from common.exceptions import DispatchFatalError
from common.types import Batch

logger = logging.getLogger(__name__)

BatchWork = Callable[[Batch], None]


class ParallelDispatcher:
    """
    Bounded-parallelism executor for batch work.

    Each dispatch call gets its own pool of ``threads`` workers shared by
    all of its batches. The call is all-or-nothing: it returns once every
    batch completed, or raises the first failure. I/O failures (OSError)
    propagate unchanged, anything else is wrapped in DispatchFatalError.
    Work already completed by other batches is left in place.
    """

    def __init__(self, threads: int = DEFAULT_THREADS):
        """
        Args:
            threads: Number of worker threads

        Raises:
            ValueError: If threads < 1
        """
        if threads < 1:
            raise ValueError(f"threads must be >= 1, got {threads}")
        self._threads = threads

    @property
    def threads(self) -> int:
        return self._threads

    def dispatch(
        self,
        batches: Iterable[Batch],
        work: BatchWork,
        cancel_event: Optional[threading.Event] = None
    ) -> None:
        """
        Run work on every batch and block until all complete or one fails.

        Args:
            batches: Batches to process, one task each
            work: Callable invoked with exactly one batch per task
            cancel_event: Optional cancellation token. Tasks that start after
                it is set skip their batch, and dispatch returns normally.

        Raises:
            OSError: First I/O failure raised by a task
            DispatchFatalError: First non-I/O failure raised by a task
            KeyboardInterrupt: If the calling thread is interrupted while waiting
        """
        batches = list(batches)
        if not batches:
            logger.debug("dispatch() nothing to do")
            return

        if cancel_event is None:
            cancel_event = threading.Event()

        logger.debug(f"dispatch() batches: {len(batches)}, threads: {self._threads}")

        executor = ThreadPoolExecutor(max_workers=self._threads, thread_name_prefix="backup-batch")
        try:
            futures = [
                executor.submit(self._run, work, batch, index, cancel_event)
                for index, batch in enumerate(batches)
            ]
            done, _ = wait(futures, return_when=FIRST_EXCEPTION)
        except BaseException as e:
            cancel_event.set()
            executor.shutdown(wait=False, cancel_futures=True)
            if isinstance(e, KeyboardInterrupt):
                logger.warning("dispatch() interrupted, pending batches cancelled")
            raise

        failure = self._first_failure(futures, done)
        if failure is not None:
            cancel_event.set()
        # Joins in-flight tasks; pending ones are dropped once a batch failed.
        executor.shutdown(wait=True, cancel_futures=failure is not None)

        if failure is not None:
            if isinstance(failure, KeyboardInterrupt):
                logger.warning("dispatch() interrupted in batch task, pending batches cancelled")
                raise failure
            if isinstance(failure, OSError):
                logger.error(f"dispatch() batch failed with I/O error: {failure}")
                raise failure
            logger.error(f"dispatch() batch failed with unexpected error: {failure!r}")
            raise DispatchFatalError(f"Batch task failed: {failure!r}") from failure

        skipped = sum(1 for future in futures if future.result() is False)
        if skipped:
            logger.warning(f"dispatch() cancelled, skipped batches: {skipped}/{len(batches)}")
        else:
            logger.debug(f"dispatch() completed batches: {len(batches)}")

    @staticmethod
    def _run(work: BatchWork, batch: Batch, index: int, cancel_event: threading.Event) -> bool:
        if cancel_event.is_set():
            logger.debug(f"Skipping batch {index}: cancelled")
            return False
        logger.debug(f"Running batch {index}: {len(batch)} assets")
        work(batch)
        return True

    @staticmethod
    def _first_failure(futures: List[Future], done: Set[Future]) -> Optional[BaseException]:
        """First exception in submission order among completed futures."""
        for future in futures:
            if future in done and not future.cancelled():
                error = future.exception()
                if error is not None:
                    return error
        return None
