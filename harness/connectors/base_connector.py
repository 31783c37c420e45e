"""Abstract connector contracts implemented by sources and destinations."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from ..protocol import (
    Catalog,
    ConfiguredCatalog,
    ConnectionStatus,
    ConnectorSpecification,
    ProtocolMessage,
)

OutputCollector = Callable[[ProtocolMessage], None]


class MessageIterator(Iterator[ProtocolMessage]):
    """Lazy, single-pass stream of messages bound to a releasable resource.

    ``close`` releases the resource the first time it is called and is a no-op
    afterwards. A closed iterator is exhausted.
    """

    def __init__(self, messages: Iterable[ProtocolMessage], on_close: Callable[[], None] | None = None):
        self._messages = iter(messages)
        self._on_close = on_close
        self.closed = False

    def __iter__(self) -> "MessageIterator":
        return self

    def __next__(self) -> ProtocolMessage:
        if self.closed:
            raise StopIteration
        return next(self._messages)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True

        close_messages = getattr(self._messages, "close", None)
        try:
            if close_messages is not None:
                close_messages()
        finally:
            if self._on_close is not None:
                self._on_close()

    def __enter__(self) -> "MessageIterator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class MessageConsumer(ABC):
    """Destination-side sink with a ``start -> accept* -> close`` lifecycle."""

    @abstractmethod
    def start(self) -> None:
        """Prepare resources before the first message arrives."""
        pass

    @abstractmethod
    def accept(self, message: ProtocolMessage) -> None:
        """Handle one message read from the input stream."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Flush and release resources. Called once per run, even after a failure."""
        pass

    def __enter__(self) -> "MessageConsumer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class Integration(ABC):
    """Operations shared by every connector."""

    @abstractmethod
    def spec(self) -> ConnectorSpecification:
        """Describe the connector, including the JSON Schema its config must satisfy."""
        pass

    @abstractmethod
    def check(self, config: dict[str, Any]) -> ConnectionStatus:
        """Verify that the connector can reach its system with ``config``."""
        pass


class Source(Integration):
    @abstractmethod
    def discover(self, config: dict[str, Any]) -> Catalog:
        """List the streams this source can read."""
        pass

    @abstractmethod
    def read(
        self,
        config: dict[str, Any],
        catalog: ConfiguredCatalog,
        state: Any | None,
    ) -> MessageIterator:
        """Return a lazy stream of RECORD/STATE/LOG messages for the configured streams."""
        pass


class Destination(Integration):
    @abstractmethod
    def get_consumer(
        self,
        config: dict[str, Any],
        catalog: ConfiguredCatalog,
        output_collector: OutputCollector,
    ) -> MessageConsumer:
        """Return a consumer that persists messages and may emit STATE through ``output_collector``."""
        pass
