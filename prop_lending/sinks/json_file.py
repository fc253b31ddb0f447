"""JSON Lines file sink for exporting events."""

import json
import logging
from pathlib import Path
from typing import Any, TextIO

from prop_lending.exceptions import SinkError
from prop_lending.sinks.base import EventSink
from prop_lending.sinks.serialization import to_payload

logger = logging.getLogger(__name__)


class JsonFileSink(EventSink):
    """Append events to one ``.jsonl`` file per topic."""

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON Lines files.
        pretty : bool
            Indent each record. Produces multi-line records, so only useful
            for reading by eye.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self._files: dict[str, TextIO] = {}
        self._counts: dict[str, int] = {}

    def path_for(self, topic: str) -> Path:
        """File that holds ``topic``'s records (dots become underscores)."""
        return self.output_dir / (topic.replace(".", "_") + ".jsonl")

    def send(self, topic: str, record: Any) -> None:
        """Append a record to the topic's file."""
        data = to_payload(record)
        indent = 2 if self.pretty else None
        try:
            handle = self._files.get(topic)
            if handle is None:
                handle = open(self.path_for(topic), "a", encoding="utf-8")
                self._files[topic] = handle
            handle.write(json.dumps(data, ensure_ascii=False, default=str, indent=indent) + "\n")
            handle.flush()
        except OSError as e:
            raise SinkError(f"Cannot write {topic} to {self.output_dir}: {e}") from e

        self._counts[topic] = self._counts.get(topic, 0) + 1

    def close(self) -> None:
        """Close open files and log a summary."""
        for handle in self._files.values():
            handle.close()
        self._files.clear()

        logger.info("JSON files written to: %s", self.output_dir)
        for topic, count in self._counts.items():
            logger.info("  %s: %d records", topic, count)
