"""Common interface for lifecycle event sinks."""

from abc import ABC, abstractmethod
from typing import Any


class EventSink(ABC):
    """Destination for lifecycle events."""

    @abstractmethod
    def send(self, topic: str, record: Any) -> None:
        """Publish a single record to ``topic``."""

    def write_batch(self, topic: str, records: list[Any]) -> None:
        """Publish several records to ``topic``."""
        for record in records:
            self.send(topic, record)

    @abstractmethod
    def close(self) -> None:
        """Flush and release resources."""
