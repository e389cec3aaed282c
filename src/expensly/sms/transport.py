# src/expensly/sms/transport.py
"""Message transport: lists inbox messages inside a time window."""
import asyncio
import json
from pathlib import Path
from typing import List, Protocol, Union

from pydantic import BaseModel, Field, ValidationError

from .models import RawMessage
from expensly.utils.logger import get_logger
from expensly.utils.retry import retry_with_backoff
from expensly.utils.exceptions import TransportError, RetryableTransportError

logger = get_logger()


class MessageTransport(Protocol):
    """Anything that can list inbox messages received in [start_ms, end_ms]."""

    async def list_messages(self, start_ms: int, end_ms: int) -> List[RawMessage]:
        ...


class SmsPayload(BaseModel):
    """Pydantic schema for one record of an SMS inbox dump."""
    address: str = Field(description="Sender address, e.g. a bank short code")
    body: str = Field(description="Message text")
    date: int = Field(description="Received timestamp in epoch milliseconds")

    def to_message(self) -> RawMessage:
        return RawMessage(body=self.body, sender=self.address, timestamp_ms=self.date)


class JsonInboxTransport:
    """Reads messages from a JSON export of a device inbox.

    The file holds a JSON array of ``{"address", "body", "date"}`` objects,
    the same shape an Android SMS list call returns. The file is re-read on
    every call so messages appended between polls are picked up.
    """

    def __init__(
        self,
        inbox_path: Union[str, Path],
        retry_max_retries: int = 2,
        retry_initial_delay: float = 1,
        retry_backoff_factor: float = 2
    ):
        self.inbox_path = Path(inbox_path)
        self.retry_max_retries = retry_max_retries
        self.retry_initial_delay = retry_initial_delay
        self.retry_backoff_factor = retry_backoff_factor

    @retry_with_backoff()
    async def list_messages(self, start_ms: int, end_ms: int) -> List[RawMessage]:
        """List messages whose timestamp falls inside the inclusive window."""
        records = await asyncio.to_thread(self._read_records)

        messages = []
        for index, record in enumerate(records):
            try:
                payload = SmsPayload.model_validate(record)
            except ValidationError as e:
                logger.warning(f"Skipping malformed inbox record #{index}: {e.error_count()} errors")
                continue

            if start_ms <= payload.date <= end_ms:
                messages.append(payload.to_message())

        logger.debug(f"Listed {len(messages)} messages in window [{start_ms}, {end_ms}]")
        return messages

    def _read_records(self) -> list:
        try:
            with open(self.inbox_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise RetryableTransportError(f"Cannot read inbox {self.inbox_path}: {e}")
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise TransportError(f"Inbox {self.inbox_path} is not valid UTF-8 JSON: {e}")

        if not isinstance(data, list):
            raise TransportError(f"Inbox {self.inbox_path} must contain a JSON array")
        return data
