"""Console sink for debugging and development."""

import json
from typing import Any

from prop_lending.sinks.base import EventSink
from prop_lending.sinks.serialization import to_payload


class ConsoleSink(EventSink):
    """Output events to console (stdout) for debugging."""

    def __init__(self, pretty: bool = True) -> None:
        """Initialize console sink.

        Parameters
        ----------
        pretty : bool
            Pretty-print JSON output.
        """
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def send(self, topic: str, record: Any) -> None:
        """Print a single record."""
        data = to_payload(record)
        print(f"[{topic}]")
        if self.pretty:
            print(json.dumps(data, indent=2, ensure_ascii=False, default=str))
        else:
            print(json.dumps(data, ensure_ascii=False, default=str))

        self._counts[topic] = self._counts.get(topic, 0) + 1

    def write_batch(self, topic: str, records: list[Any]) -> None:
        """Print a batch of records under a header."""
        print(f"\n{'='*60}")
        print(f"Topic: {topic} ({len(records)} records)")
        print("=" * 60)
        super().write_batch(topic, records)

    def close(self) -> None:
        """Print summary and close."""
        print(f"\n{'='*60}")
        print("Console Sink Summary")
        print("=" * 60)
        for topic, count in self._counts.items():
            print(f"  {topic}: {count} records")
