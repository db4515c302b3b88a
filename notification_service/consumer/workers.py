"""Per-partition worker threads.

Each assigned partition gets one worker that runs the record handler to
completion before taking the partition's next record, so per-partition
order is preserved while different partitions are drained concurrently.
"""

import queue
import threading
from typing import Callable, Optional

from notification_service.events.models import ConsumedRecord
from notification_service.logging import get_logger
from notification_service.logging.context import log_context

logger = get_logger(__name__, component="consumer")

RecordHandler = Callable[[ConsumedRecord], None]

_STOP = object()


class PartitionWorker(threading.Thread):
    """Runs the handler for one topic partition on a dedicated thread.

    Records are handed over with ``submit``. After the handler returns
    (or raises) the record is reported through ``on_complete`` so its
    offset can be stored; a handler exception is logged and never stops
    the worker.
    """

    def __init__(
        self,
        topic: str,
        partition: int,
        handler: RecordHandler,
        on_complete: Callable[[ConsumedRecord], None],
    ):
        super().__init__(name=f"partition-{topic}-{partition}", daemon=True)
        self.topic = topic
        self.partition = partition
        self.handler = handler
        self.on_complete = on_complete
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._stopping = threading.Event()
        self.processed = 0
        self.failed = 0

    @property
    def pending(self) -> int:
        """Records queued but not yet started."""
        return self._queue.qsize()

    def submit(self, record: ConsumedRecord) -> int:
        """Queue a record and return the new queue depth."""
        self._queue.put(record)
        return self._queue.qsize()

    def stop(self) -> None:
        """Ask the worker to exit once the in-flight record (if any) completes.

        Queued records that have not started are dropped; their offsets are
        never stored, so they are delivered again after a restart or
        rebalance.
        """
        self._stopping.set()
        self._queue.put(_STOP)

    def run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP or self._stopping.is_set():
                break
            self._handle(item)

        logger.debug(
            f"Worker for {self.topic}[{self.partition}] stopped",
            extra={
                "event": "consumer.worker.stopped",
                "topic": self.topic,
                "partition": self.partition,
                "processed": self.processed,
                "failed": self.failed,
            },
        )

    def _handle(self, record: ConsumedRecord) -> None:
        with log_context(topic=record.topic, partition=record.partition, offset=record.offset):
            try:
                self.handler(record)
            except Exception as e:
                self.failed += 1
                logger.error(
                    f"Record handler failed: {e}",
                    extra={"event": "consumer.handler.failed", "error_type": type(e).__name__},
                    exc_info=True,
                )
            else:
                self.processed += 1
            finally:
                self.on_complete(record)

    def shutdown(self, timeout: Optional[float] = None) -> bool:
        """Stop and join the worker. Returns False if it is still running."""
        self.stop()
        self.join(timeout)
        alive = self.is_alive()
        if alive:
            logger.warning(
                f"Worker for {self.topic}[{self.partition}] did not stop within {timeout}s",
                extra={"event": "consumer.worker.stuck", "topic": self.topic, "partition": self.partition},
            )
        return not alive
