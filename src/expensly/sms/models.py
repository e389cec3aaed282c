"""Data models for inbox messages."""
from dataclasses import dataclass


@dataclass(frozen=True)
class RawMessage:
    """A single inbox message as handed over by the transport."""
    body: str
    sender: str
    timestamp_ms: int
