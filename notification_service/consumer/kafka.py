"""Kafka stream consumer built on confluent-kafka.

The poll loop runs on the calling thread and hands each record to the
worker thread of its partition. Offsets are stored only after the handler
finished with a record and are committed by the client's auto-committer,
which gives at-least-once delivery with per-partition ordering.
"""

import queue
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

from confluent_kafka import OFFSET_BEGINNING, OFFSET_INVALID, Consumer, KafkaError, KafkaException, TopicPartition

from notification_service.config.models import KafkaConfig
from notification_service.events.models import ConsumedRecord
from notification_service.logging import get_logger
from notification_service.utils.timestamps import from_epoch_millis

from .exceptions import ConsumerConnectionError, ConsumerSubscriptionError, StreamConsumerError
from .models import ConsumerState
from .workers import PartitionWorker, RecordHandler

logger = get_logger(__name__, component="consumer")

PartitionKey = Tuple[str, int]


def _decode_headers(headers: Optional[Sequence[Tuple[str, Optional[bytes]]]]) -> Dict[str, Optional[str]]:
    decoded: Dict[str, Optional[str]] = {}
    for name, value in headers or []:
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        decoded[name] = value
    return decoded


def to_consumed_record(message: Any) -> ConsumedRecord:
    """Convert a confluent_kafka.Message into a ConsumedRecord."""
    _, timestamp_ms = message.timestamp()
    return ConsumedRecord(
        topic=message.topic(),
        partition=message.partition(),
        offset=message.offset(),
        key=message.key(),
        value=message.value(),
        headers=_decode_headers(message.headers()),
        timestamp=from_epoch_millis(timestamp_ms),
    )


class StreamConsumer:
    """Consumer-group member that feeds records to a handler.

    Args:
        config: Kafka settings
        sasl_username: SASL user (enables SASL_SSL together with sasl_password)
        sasl_password: SASL password
        consumer_factory: Callable building the client from a config dict
        poll_timeout: Seconds each poll waits for a record
        shutdown_timeout: Seconds to wait for a worker's in-flight record on stop
    """

    def __init__(
        self,
        config: KafkaConfig,
        sasl_username: Optional[str] = None,
        sasl_password: Optional[str] = None,
        consumer_factory: Optional[Callable[[Dict[str, Any]], Any]] = None,
        poll_timeout: float = 1.0,
        shutdown_timeout: float = 60.0,
    ):
        self.config = config
        self.sasl_username = sasl_username
        self.sasl_password = sasl_password
        self.consumer_factory = consumer_factory or Consumer
        self.poll_timeout = poll_timeout
        self.shutdown_timeout = shutdown_timeout

        self.state = ConsumerState.DISCONNECTED
        self._consumer: Optional[Any] = None
        self._handler: Optional[RecordHandler] = None
        self._from_beginning = False
        self._workers: Dict[PartitionKey, PartitionWorker] = {}
        # Workers that outlived shutdown_timeout; joined before their partition gets a new worker
        self._stuck: Dict[PartitionKey, PartitionWorker] = {}
        self._paused: Set[PartitionKey] = set()
        self._completed: "queue.SimpleQueue[ConsumedRecord]" = queue.SimpleQueue()
        self._stop_event = threading.Event()

    def build_client_config(self) -> Dict[str, Any]:
        """Translate KafkaConfig into librdkafka settings."""
        client_config: Dict[str, Any] = {
            "bootstrap.servers": ",".join(self.config.brokers),
            "client.id": self.config.client_id,
            "group.id": self.config.effective_group_id,
            "enable.auto.commit": True,
            "enable.auto.offset.store": False,
            "auto.offset.reset": self.config.auto_offset_reset,
            "session.timeout.ms": self.config.session_timeout_ms,
            "error_cb": self._on_client_error,
        }

        if self.config.sasl_mechanism and self.sasl_username and self.sasl_password:
            client_config.update(
                {
                    "security.protocol": "SASL_SSL",
                    "sasl.mechanism": self.config.sasl_mechanism,
                    "sasl.username": self.sasl_username,
                    "sasl.password": self.sasl_password,
                }
            )

        return client_config

    def connect(self) -> None:
        """Create the client and verify the brokers are reachable.

        Raises:
            ConsumerConnectionError: If the client cannot be created or the
                cluster metadata cannot be fetched in time
        """
        if self.state is not ConsumerState.DISCONNECTED:
            raise StreamConsumerError(f"Cannot connect while {self.state.value}")

        brokers = ",".join(self.config.brokers)
        logger.info(
            f"Connecting to Kafka brokers {brokers}",
            extra={"event": "consumer.connecting", "brokers": brokers},
        )

        try:
            self._consumer = self.consumer_factory(self.build_client_config())
            metadata = self._consumer.list_topics(timeout=self.config.connect_timeout_seconds)
        except (KafkaException, ValueError, TypeError) as e:
            raise ConsumerConnectionError(f"Failed to connect to Kafka at {brokers}: {e}") from e

        self._stop_event.clear()
        self.state = ConsumerState.CONNECTED
        logger.info(
            "Connected to Kafka",
            extra={
                "event": "consumer.connected",
                "broker_count": len(getattr(metadata, "brokers", {}) or {}),
            },
        )

    def subscribe(self, topics: Optional[List[str]] = None, from_beginning: Optional[bool] = None) -> None:
        """Join the consumer group and subscribe to topics.

        Args:
            topics: Topics to subscribe to (defaults to the configured topics)
            from_beginning: Start partitions without a committed offset at
                the earliest offset (defaults to the configured value)

        Raises:
            ConsumerSubscriptionError: If not connected or the subscription fails
        """
        if self.state is not ConsumerState.CONNECTED:
            raise ConsumerSubscriptionError(f"Cannot subscribe while {self.state.value}")

        topics = list(topics or self.config.topics)
        self._from_beginning = self.config.from_beginning if from_beginning is None else from_beginning

        try:
            self._consumer.subscribe(
                topics,
                on_assign=self._on_assign,
                on_revoke=self._on_revoke,
                on_lost=self._on_revoke,
            )
        except (KafkaException, ValueError, TypeError) as e:
            raise ConsumerSubscriptionError(f"Failed to subscribe to {', '.join(topics)}: {e}") from e

        self.state = ConsumerState.SUBSCRIBED
        logger.info(
            f"Subscribed to {', '.join(topics)}",
            extra={
                "event": "consumer.subscribed",
                "topics": topics,
                "group_id": self.config.effective_group_id,
                "from_beginning": self._from_beginning,
            },
        )

    def consume(self, handler: RecordHandler) -> None:
        """Poll records and dispatch them until ``stop`` is called.

        Raises:
            StreamConsumerError: If not subscribed
            ConsumerConnectionError: On a fatal client error
        """
        if self.state is not ConsumerState.SUBSCRIBED:
            raise StreamConsumerError(f"Cannot consume while {self.state.value}")

        self._handler = handler
        self.state = ConsumerState.CONSUMING
        logger.info("Consuming records", extra={"event": "consumer.started"})

        while not self._stop_event.is_set():
            message = self._consumer.poll(self.poll_timeout)
            self._process_completed()

            if message is None:
                continue

            error = message.error()
            if error is not None:
                self._handle_poll_error(error)
                continue

            self._dispatch(to_consumed_record(message))

        logger.info("Consume loop stopped", extra={"event": "consumer.loop.stopped"})

    def stop(self) -> None:
        """End the consume loop after the current poll. Safe to call from a signal handler."""
        self._stop_event.set()

    def disconnect(self) -> None:
        """Stop workers, store finished offsets and leave the group."""
        self.stop()

        for key in list(self._workers):
            self._stop_worker(key)
        self._paused.clear()
        self._stuck.clear()
        self._process_completed()

        if self._consumer is not None:
            try:
                self._consumer.close()
            except (KafkaException, RuntimeError) as e:
                logger.warning(
                    f"Error closing Kafka consumer: {e}",
                    extra={"event": "consumer.close.failed"},
                )
            self._consumer = None

        self.state = ConsumerState.DISCONNECTED
        logger.info("Disconnected from Kafka", extra={"event": "consumer.disconnected"})

    def _dispatch(self, record: ConsumedRecord) -> None:
        key = (record.topic, record.partition)
        worker = self._workers.get(key)
        if worker is None:
            self._await_stuck_worker(key)
            worker = PartitionWorker(record.topic, record.partition, self._handler, self._completed.put)
            worker.start()
            self._workers[key] = worker

        depth = worker.submit(record)
        if depth >= self.config.max_pending_per_partition and key not in self._paused:
            self._consumer.pause([TopicPartition(*key)])
            self._paused.add(key)
            logger.info(
                f"Paused {record.topic}[{record.partition}] at {depth} pending records",
                extra={"event": "consumer.partition.paused", "pending": depth},
            )

    def _process_completed(self) -> None:
        """Store offsets of finished records and resume drained partitions."""
        latest: Dict[PartitionKey, int] = {}
        while True:
            try:
                record = self._completed.get_nowait()
            except queue.Empty:
                break
            key = (record.topic, record.partition)
            latest[key] = max(record.offset, latest.get(key, -1))

        if latest and self._consumer is not None:
            offsets = [TopicPartition(topic, partition, offset + 1) for (topic, partition), offset in latest.items()]
            try:
                self._consumer.store_offsets(offsets=offsets)
            except KafkaException as e:
                # Partition was revoked after the record finished
                logger.debug(
                    f"Could not store offsets: {e}",
                    extra={"event": "consumer.offsets.store_failed"},
                )

        if self._consumer is None:
            return

        resume_below = self.config.max_pending_per_partition // 2
        for key in list(self._paused):
            worker = self._workers.get(key)
            if worker is None or worker.pending <= resume_below:
                self._consumer.resume([TopicPartition(*key)])
                self._paused.discard(key)
                logger.info(
                    f"Resumed {key[0]}[{key[1]}]",
                    extra={"event": "consumer.partition.resumed", "topic": key[0], "partition": key[1]},
                )

    def _handle_poll_error(self, error: KafkaError) -> None:
        if error.code() == KafkaError._PARTITION_EOF:
            return
        if error.fatal():
            logger.error(
                f"Fatal Kafka error: {error}",
                extra={"event": "consumer.error.fatal", "error_code": error.name()},
            )
            raise ConsumerConnectionError(f"Fatal Kafka error: {error.str()}")
        logger.warning(
            f"Kafka poll error: {error}",
            extra={"event": "consumer.error", "error_code": error.name()},
        )

    def _on_client_error(self, error: KafkaError) -> None:
        logger.error(
            f"Kafka client error: {error}",
            extra={"event": "consumer.client.error", "error_code": error.name()},
        )

    def _on_assign(self, consumer: Any, partitions: List[TopicPartition]) -> None:
        if self._from_beginning and partitions:
            try:
                committed = consumer.committed(partitions, timeout=self.config.connect_timeout_seconds)
            except KafkaException as e:
                logger.warning(
                    f"Could not read committed offsets, using auto.offset.reset: {e}",
                    extra={"event": "consumer.offsets.lookup_failed"},
                )
            else:
                for partition, current in zip(partitions, committed):
                    if current.offset == OFFSET_INVALID:
                        partition.offset = OFFSET_BEGINNING
                consumer.assign(partitions)

        logger.info(
            f"Assigned {len(partitions)} partition(s)",
            extra={
                "event": "consumer.partition.assigned",
                "partitions": [f"{tp.topic}[{tp.partition}]" for tp in partitions],
            },
        )

    def _on_revoke(self, consumer: Any, partitions: List[TopicPartition]) -> None:
        for tp in partitions:
            key = (tp.topic, tp.partition)
            self._stop_worker(key)
            self._paused.discard(key)

        self._process_completed()

        try:
            consumer.commit(asynchronous=False)
        except KafkaException as e:
            # Nothing stored since the last commit
            logger.debug(f"Commit on revoke skipped: {e}", extra={"event": "consumer.commit.skipped"})

        logger.info(
            f"Revoked {len(partitions)} partition(s)",
            extra={
                "event": "consumer.partition.revoked",
                "partitions": [f"{tp.topic}[{tp.partition}]" for tp in partitions],
            },
        )

    def _stop_worker(self, key: PartitionKey) -> None:
        worker = self._workers.pop(key, None)
        if worker is not None and not worker.shutdown(timeout=self.shutdown_timeout):
            self._stuck[key] = worker

    def _await_stuck_worker(self, key: PartitionKey) -> None:
        """Block until a previous worker for this partition has finished its record."""
        stuck = self._stuck.pop(key, None)
        if stuck is None:
            return
        if stuck.is_alive():
            logger.warning(
                f"Waiting for previous worker of {key[0]}[{key[1]}] before dispatching",
                extra={"event": "consumer.worker.waiting", "topic": key[0], "partition": key[1]},
            )
        stuck.join()
