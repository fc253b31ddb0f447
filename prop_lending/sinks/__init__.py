"""Output sinks for lifecycle events."""

from prop_lending.sinks.base import EventSink
from prop_lending.sinks.console import ConsoleSink
from prop_lending.sinks.json_file import JsonFileSink
from prop_lending.sinks.kafka import KafkaSink

__all__ = ["ConsoleSink", "EventSink", "JsonFileSink", "KafkaSink"]
