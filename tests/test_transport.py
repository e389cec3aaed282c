"""Tests for the JSON inbox transport."""
import asyncio
import json
import shutil
import tempfile
import threading
import unittest
from pathlib import Path

from expensly.ledger.models import Category
from expensly.ledger.state import LedgerState
from expensly.polling.cycle import PollCycle
from expensly.sms.models import RawMessage
from expensly.sms.permission import PromptPermissionGate, StaticPermissionGate
from expensly.sms.transport import JsonInboxTransport
from expensly.utils.exceptions import TransportError


class TestJsonInboxTransport(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.inbox = self.test_dir / "inbox.json"

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def _write(self, records):
        self.inbox.write_text(json.dumps(records), encoding="utf-8")

    async def test_lists_messages_in_inclusive_window(self):
        self._write([
            {"address": "BANK", "body": "a", "date": 100},
            {"address": "BANK", "body": "b", "date": 200},
            {"address": "BANK", "body": "c", "date": 300},
        ])
        transport = JsonInboxTransport(self.inbox)

        messages = await transport.list_messages(100, 200)

        self.assertEqual(messages, [
            RawMessage(body="a", sender="BANK", timestamp_ms=100),
            RawMessage(body="b", sender="BANK", timestamp_ms=200),
        ])

    async def test_skips_malformed_records(self):
        self._write([
            {"address": "BANK", "body": "ok", "date": 100},
            {"address": "BANK", "date": 100},
            {"address": "BANK", "body": "bad date", "date": "yesterday"},
        ])
        messages = await JsonInboxTransport(self.inbox).list_messages(0, 1000)

        self.assertEqual([m.body for m in messages], ["ok"])

    async def test_missing_inbox_raises_after_retries(self):
        transport = JsonInboxTransport(self.inbox, retry_max_retries=1, retry_initial_delay=0)
        with self.assertRaises(TransportError):
            await transport.list_messages(0, 1000)

    async def test_invalid_json(self):
        self.inbox.write_text("not json", encoding="utf-8")
        with self.assertRaises(TransportError):
            await JsonInboxTransport(self.inbox, retry_max_retries=0).list_messages(0, 1000)

    async def test_non_utf8_inbox(self):
        self.inbox.write_bytes(b'[{"address":"B","body":"debited \xff","date":1}]')
        with self.assertRaises(TransportError):
            await JsonInboxTransport(self.inbox, retry_max_retries=0).list_messages(0, 1000)

    async def test_non_array_json(self):
        self._write({"address": "BANK"})
        with self.assertRaises(TransportError):
            await JsonInboxTransport(self.inbox, retry_max_retries=0).list_messages(0, 1000)


class TestPermissionGates(unittest.IsolatedAsyncioTestCase):

    async def test_static_gate(self):
        self.assertTrue(await StaticPermissionGate(True).request_authorization())
        self.assertFalse(await StaticPermissionGate(False).request_authorization())

    async def test_prompt_gate_remembers_yes(self):
        answers = iter(["y"])
        gate = PromptPermissionGate(input_func=lambda prompt: next(answers))

        self.assertTrue(await gate.request_authorization())
        # A second call must not prompt again; the iterator is exhausted.
        self.assertTrue(await gate.request_authorization())

    async def test_prompt_gate_denied(self):
        gate = PromptPermissionGate(input_func=lambda prompt: "n")
        self.assertFalse(await gate.request_authorization())

    async def test_prompt_gate_timeout_leaves_daemon_reader(self):
        release = threading.Event()

        def blocking_input(prompt):
            release.wait(5)
            return "y"

        gate = PromptPermissionGate(input_func=blocking_input)
        with self.assertRaises(asyncio.TimeoutError):
            await asyncio.wait_for(gate.request_authorization(), timeout=0.05)

        readers = [t for t in threading.enumerate() if t.name == "expensly-permission-prompt"]
        self.assertTrue(readers)
        self.assertTrue(all(t.daemon for t in readers))
        release.set()

    async def test_prompt_gate_without_terminal(self):
        def no_terminal(prompt):
            raise EOFError

        gate = PromptPermissionGate(input_func=no_terminal)
        self.assertFalse(await gate.request_authorization())


class TestUndecodableInbox(unittest.IsolatedAsyncioTestCase):
    """A corrupt inbox file must not escape the poll cycle."""

    async def test_tail_poll_keeps_state(self):
        test_dir = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, test_dir, True)
        inbox = test_dir / "inbox.json"
        inbox.write_bytes(b'[{"address":"B","body":"debited \xff","date":1}]')

        cycle = PollCycle(JsonInboxTransport(inbox, retry_max_retries=0), StaticPermissionGate(True))
        self.addCleanup(cycle.registry.close)
        state = LedgerState.initial(0, Category.DEBITS)

        self.assertIs(await cycle.poll_incremental(state), state)


if __name__ == "__main__":
    unittest.main()
