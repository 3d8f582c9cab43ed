import json
import logging

import pika
from pika.exceptions import AMQPConnectionError, AMQPError, ChannelWrongStateError

from .metadata import DocumentMetadata

logger = logging.getLogger(__name__)

DEFAULT_QUEUE = "document_imports"


class MqPublisher:
    """Announce imported documents on a RabbitMQ queue for whoever refreshes the document store."""

    def __init__(self, host: str = "localhost", queue: str = DEFAULT_QUEUE):
        self.host = host
        self.queue = queue
        self._connection = None
        self._channel = None
        self._enabled = True

        try:
            self._connect()
        except AMQPError as e:
            # broker not reachable - keep receiving documents, skip publishing
            logger.warning("RabbitMQ at %s not reachable, import notifications disabled: %s", self.host, e)
            self._enabled = False

    def _connect(self) -> None:
        self._connection = pika.BlockingConnection(pika.ConnectionParameters(self.host))
        self._channel = self._connection.channel()
        self._channel.queue_declare(queue=self.queue, durable=False)

    @property
    def enabled(self) -> bool:
        return self._enabled and self._channel is not None

    def publish_import(self, identifier: str, metadata: DocumentMetadata) -> bool:
        if not self.enabled:
            return False
        body = json.dumps({
            "event": "document.imported",
            "id": identifier,
            "visibleName": metadata.visible_name,
            "lastModified": metadata.last_modified,
        })
        try:
            try:
                if self._connection.is_closed:
                    raise AMQPConnectionError("connection already closed")
                self._channel.basic_publish(exchange="", routing_key=self.queue, body=body)
            except (AMQPConnectionError, ChannelWrongStateError) as e:
                # the listener sits in accept() without serving heartbeats,
                # so the broker drops idle connections; reconnect once
                logger.info("RabbitMQ connection lost (%s), reconnecting", e)
                self._connect()
                self._channel.basic_publish(exchange="", routing_key=self.queue, body=body)
        except AMQPError as e:
            logger.error("Failed to publish import of %s: %s", identifier, e)
            return False
        return True

    def close(self) -> None:
        if self._connection is None or self._connection.is_closed:
            return
        try:
            self._connection.close()
        except AMQPError as e:
            logger.warning("Error closing RabbitMQ connection: %s", e)
