"""Streaming loops between a connector and the process's standard streams."""

from typing import TextIO

from .._logging import get_logger
from ..connectors.base_connector import MessageConsumer, MessageIterator, OutputCollector
from ..errors import MalformedMessageError
from ..protocol import decode_lines, deserialize_message, split_lines

LOGGER = get_logger("runner.pipelines")


def read_pipeline(messages: MessageIterator, output_collector: OutputCollector) -> int:
    """Forward every message from ``messages`` to ``output_collector`` in order.

    The iterator is released once, whether it is exhausted, it raises, or the
    collector raises.
    """
    forwarded = 0
    with messages:
        for message in messages:
            output_collector(message)
            forwarded += 1

    LOGGER.info("Read pipeline forwarded %s messages", forwarded)
    return forwarded


def _log_invalid_message(line: str, error: MalformedMessageError) -> None:
    LOGGER.error("Received invalid message: %s (%s)", line, error.reason)


def write_pipeline(consumer: MessageConsumer, stream: TextIO) -> int:
    """Feed each JSON line of ``stream`` to ``consumer``.

    Undecodable lines are logged and skipped. ``consumer.close`` runs exactly
    once, after the stream is exhausted or as soon as anything else fails.
    """
    accepted = 0
    with consumer:
        consumer.start()
        for message in decode_lines(split_lines(stream), deserialize_message, _log_invalid_message):
            consumer.accept(message)
            accepted += 1

    LOGGER.info("Write pipeline accepted %s messages", accepted)
    return accepted
