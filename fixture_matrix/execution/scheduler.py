"""
Bounded worker pool for matrix execution.

Design rules:
- Fixed number of worker threads pulling from ONE shared queue
- No per-worker queues, no prioritization
- Setup phase runs to completion before any worker starts
- Each item is popped exactly once (deque.popleft under a lock)
- Fail-fast: the first exception stops further dispatch; in-flight items
  finish, queued items are counted as abandoned and reported
- run() returns only after every worker has finished its last item
"""

import logging
import threading
from collections import deque
from typing import Callable, Deque, Generic, List, Optional, Sequence, Tuple, TypeVar

from .errors import ItemFailure, MatrixAbortedError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class WorkerPool(Generic[T, R]):
    """
    Shared-queue thread pool.

    Workers block only while an external process runs; Python threads
    release the GIL there, so threads give real parallelism for this
    workload.
    """

    def __init__(self, workers: int):
        """
        Args:
            workers: Maximum concurrent workers (>= 1)
        """
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        self.workers = workers
        self._lock = threading.Lock()
        self._queue: Deque[Tuple[int, T]] = deque()
        self._results: List[R] = []
        self._failures: List[ItemFailure] = []
        self._stopped = threading.Event()

    @property
    def stopped(self) -> bool:
        """True once a failure has stopped dispatch."""
        return self._stopped.is_set()

    def _next_item(self) -> Optional[Tuple[int, T]]:
        with self._lock:
            if self._stopped.is_set() or not self._queue:
                return None
            return self._queue.popleft()

    def _worker(self, work: Callable[[T, int], R]) -> None:
        while True:
            entry = self._next_item()
            if entry is None:
                return

            index, item = entry
            try:
                result = work(item, index)
            except Exception as e:
                with self._lock:
                    self._failures.append(ItemFailure(index=index, item=item, error=e))
                    first = len(self._failures) == 1
                    self._stopped.set()
                if first:
                    logger.error(f"[Scheduler] Item {index + 1} failed, stopping dispatch: {e}")
                else:
                    logger.error(f"[Scheduler] Item {index + 1} also failed: {e}")
                return

            with self._lock:
                self._results.append(result)

    def run(
        self,
        queue: Sequence[T],
        work: Callable[[T, int], R],
        setup: Optional[Callable[[], None]] = None,
    ) -> List[R]:
        """
        Run setup, then drain queue with the worker threads.

        Args:
            queue: Items in dispatch order
            work: Called as work(item, index) for every item
            setup: Called once before any item is dispatched

        Returns:
            Results in completion order

        Raises:
            MatrixAbortedError: If work raised for any item
            Exception: Whatever setup raises (nothing is dispatched)
        """
        with self._lock:
            self._queue = deque(enumerate(queue))
            self._results = []
            self._failures = []
            self._stopped.clear()

        if setup is not None:
            logger.info("[Scheduler] Running setup phase")
            setup()

        total = len(queue)
        count = min(self.workers, total)
        logger.info(f"[Scheduler] Dispatching {total} item(s) to {count} worker(s)")

        threads = [
            threading.Thread(target=self._worker, args=(work,), name=f"matrix-worker-{n}", daemon=True)
            for n in range(count)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        with self._lock:
            abandoned = len(self._queue)
            results = list(self._results)
            failures = list(self._failures)

        if failures:
            logger.error(
                f"[Scheduler] Aborted: {len(failures)} failure(s), "
                f"{len(results)} finished, {abandoned} not run"
            )
            raise MatrixAbortedError(failures, results=results, abandoned=abandoned) from failures[0].error

        logger.info(f"[Scheduler] Drained: {len(results)} item(s) processed")
        return results


def run_in_parallel(
    queue: Sequence[T],
    workers: int,
    work: Callable[[T, int], R],
    setup: Optional[Callable[[], None]] = None,
) -> List[R]:
    """Convenience wrapper: WorkerPool(workers).run(queue, work, setup)."""
    return WorkerPool(workers).run(queue, work, setup=setup)
