"""
Worker pool for catalog pages.

A fixed number of long-lived worker threads pull page indices from a
bounded queue. The producer (the calling thread) enqueues indices in
increasing order and blocks while the queue is full; workers finish pages
in any order.

The page range may be open-ended. Once a handler reports end of data, the
producer stops dispatching and workers drop any queued page beyond the
last existing one.

A failing page never stops the pool: the exception is logged, recorded as
a failed PageResult and the worker moves on to the next index.

Usage:
    pool = WorkerPool(workers=4)
    results = pool.run(process_page, first_page=0, last_page=None)
"""

import itertools
import queue
import threading
from typing import Callable, Iterable

from show_sync.core.logger import get_logger
from show_sync.models import PageResult

logger = get_logger(__name__)


# Marks the end of work for one worker
_STOP = None

# How often a blocked producer re-checks for end of data, in seconds
_PUT_POLL_INTERVAL = 0.1


class WorkerPool:
    """
    Bounded thread pool processing page indices.

    Attributes:
        workers: Number of worker threads.
        queue_size: Capacity of the page queue. Default: 2 * workers.
    """

    def __init__(self, workers: int, queue_size: int | None = None) -> None:
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self.workers = workers
        self.queue_size = queue_size or workers * 2

    def run(
        self,
        handler: Callable[[int], PageResult],
        first_page: int = 0,
        last_page: int | None = None,
        on_result: Callable[[PageResult], None] | None = None
    ) -> list[PageResult]:
        """
        Process pages first_page..last_page (inclusive) with the pool.

        Args:
            handler: Called with each page index from a worker thread.
            first_page: First page index.
            last_page: Last page index, or None to continue until a handler
                       reports end_of_data.
            on_result: Optional callback receiving each PageResult as soon
                       as it is available (from the worker thread).

        Returns:
            All PageResults in completion order. Blocks until every
            dispatched page has been handled.
        """
        pages: Iterable[int]
        if last_page is None:
            pages = itertools.count(first_page)
        else:
            pages = range(first_page, last_page + 1)

        work: queue.Queue = queue.Queue(maxsize=self.queue_size)
        results: list[PageResult] = []
        lock = threading.Lock()
        end_of_data = threading.Event()
        end_page: list[int] = []

        def worker() -> None:
            while True:
                page = work.get()
                try:
                    if page is _STOP:
                        return
                    if end_of_data.is_set() and page > end_page[0]:
                        continue

                    result = self._handle(handler, page)

                    with lock:
                        if result.end_of_data:
                            if not end_page or page < end_page[0]:
                                end_page[:] = [page]
                            end_of_data.set()
                        results.append(result)

                    if on_result is not None:
                        try:
                            on_result(result)
                        except Exception as e:
                            logger.error(f"Result callback failed for page {page}: {e}")
                finally:
                    work.task_done()

        threads = [
            threading.Thread(target=worker, name=f"page-worker-{i}", daemon=True)
            for i in range(self.workers)
        ]
        for thread in threads:
            thread.start()

        try:
            for page in pages:
                if not self._put(work, page, end_of_data):
                    break
        finally:
            for _ in threads:
                work.put(_STOP)
            for thread in threads:
                thread.join()

        logger.debug(f"Worker pool finished {len(results)} pages")
        return results

    @staticmethod
    def _put(work: queue.Queue, page: int, end_of_data: threading.Event) -> bool:
        """Enqueue page; False if end of data was reached meanwhile."""
        while not end_of_data.is_set():
            try:
                work.put(page, timeout=_PUT_POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    @staticmethod
    def _handle(handler: Callable[[int], PageResult], page: int) -> PageResult:
        try:
            return handler(page)
        except Exception as e:
            logger.error(f"Page {page} failed: {e}", exc_info=True)
            return PageResult(page=page, error=str(e))
