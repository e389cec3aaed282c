"""Tests for text rendering and the command line."""
import argparse
import contextlib
import io
import json
import os
import shutil
import tempfile
import unittest
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from unittest import mock

from expensly.ledger.models import Category, Transaction, UNPARSED, UNKNOWN
from expensly.ledger.state import LedgerState
from expensly.main import main, parse_month, print_changes
from expensly.polling.windows import ALL, to_millis
from expensly.render import render_months, render_results, render_total

class TestRender(unittest.TestCase):

    def setUp(self):
        self.state = LedgerState.initial(0, Category.DEBITS)

    def test_empty_result_renders_zero_total(self):
        state = self.state.with_range_result([], Decimal("0"), checked_ms=0)
        text = render_results(state)

        self.assertIn("Total Spent: ₹0.00", text)
        self.assertIn("No transactions made in this month", text)

    def test_transaction_cards(self):
        transactions = [
            Transaction(Decimal("250.50"), "Jane Smith", "10Feb24", "AX-HDFCBK"),
            Transaction(UNPARSED, UNKNOWN, "11/02/2024", "AX-HDFCBK"),
        ]
        state = self.state.with_range_result(transactions, Decimal("-250.50"), checked_ms=0)
        text = render_results(state)

        self.assertIn("Total Spent: ₹250.50", text)
        self.assertIn("Amount: ₹250.50", text)
        self.assertIn("To: Jane Smith", text)
        self.assertIn("Amount: unparsed", text)
        self.assertIn("Bank: AX-HDFCBK", text)

    def test_credit_labels(self):
        state = self.state.select_category(Category.CREDITS)
        state = state.with_range_result(
            [Transaction(Decimal("1500.00"), "John Doe", "05Jan24", "VM-SBIINB")],
            Decimal("1500.00"),
            checked_ms=0
        )
        text = render_results(state)

        self.assertIn("Total Received: ₹1500.00", text)
        self.assertIn("From: John Doe", text)
        self.assertEqual(render_total(state, "Rs."), "Total Received: Rs.1500.00")

    def test_months(self):
        text = render_months(2024)
        self.assertIn("January 2024", text)
        self.assertIn("All Transactions", text)


class TestPrintChanges(unittest.TestCase):
    """Output of the watch command after each tail poll."""

    def setUp(self):
        self.old_txn = Transaction(Decimal("5.00"), "Old Shop", "01Feb24", "AX-HDFCBK")
        self.new_txn = Transaction(Decimal("20.00"), "New Shop", "02Feb24", "AX-HDFCBK")
        self.state = LedgerState.initial(0, Category.DEBITS)

    def _printed(self, old, new):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            print_changes(old, new, currency_symbol="₹")
        return out.getvalue()

    def test_prints_only_prepended_cards_and_total(self):
        old = self.state.with_range_result([self.old_txn], Decimal("-5.00"), checked_ms=0)
        new = old.with_new_batch([self.new_txn], Decimal("-25.00"), checked_ms=10)

        out = self._printed(old, new)

        self.assertIn("To: New Shop", out)
        self.assertNotIn("Old Shop", out)
        self.assertTrue(out.rstrip().endswith("Total Spent: ₹25.00"))

    def test_batch_replacing_empty_marker(self):
        old = self.state.with_range_result([], Decimal("0"), checked_ms=0)
        new = old.with_new_batch([self.new_txn], Decimal("-20.00"), checked_ms=10)

        out = self._printed(old, new)

        self.assertIn("To: New Shop", out)
        self.assertNotIn("No transactions", out)
        self.assertIn("Total Spent: ₹20.00", out)

    def test_range_results_are_not_repeated(self):
        old = self.state.select_category(Category.DEBITS)
        new = old.with_range_result([self.new_txn], Decimal("-20.00"), checked_ms=0)

        self.assertEqual(self._printed(old, new), "")

    def test_empty_tail_poll_prints_nothing(self):
        old = self.state.with_range_result([self.old_txn], Decimal("-5.00"), checked_ms=0)
        new = old.with_new_batch([], old.total, checked_ms=10)

        self.assertEqual(self._printed(old, new), "")


class TestParseMonth(unittest.TestCase):

    def test_values(self):
        self.assertEqual(parse_month("1"), 0)
        self.assertEqual(parse_month("12"), 11)
        self.assertEqual(parse_month("ALL"), ALL)

    def test_rejects_out_of_range(self):
        for value in ("0", "13", "march"):
            with self.assertRaises(argparse.ArgumentTypeError):
                parse_month(value)


class TestMain(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.env = mock.patch.dict(os.environ, {"EXPENSLY_HOME": str(self.test_dir)})
        self.env.start()
        # Settings come from the packaged defaults
        os.environ.pop("EXPENSLY_CONFIG", None)
        self.inbox = self.test_dir / "inbox.json"
        feb = to_millis(datetime(2024, 2, 10, 9, 30))
        self.inbox.write_text(json.dumps([
            {"address": "AX-HDFCBK", "body": "debited by 250.50 on date 10Feb24 trf to Jane Smith Ref 456", "date": feb},
            {"address": "VM-SBIINB", "body": "credited by Rs.1500.00 on 05Jan24 transfer from John Doe Ref No 123", "date": feb + 1},
        ]), encoding="utf-8")

    def tearDown(self):
        self.env.stop()
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def _run(self, *argv):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main(list(argv))
        return code, out.getvalue()

    def test_months_command(self):
        code, out = self._run("months")

        self.assertEqual(code, 0)
        self.assertIn("March 2024", out)

    def test_range_command(self):
        code, out = self._run(
            "range", "--inbox", str(self.inbox), "--category", "debits", "--month", "2", "--yes"
        )

        self.assertEqual(code, 0)
        self.assertIn("Total Spent: ₹250.50", out)
        self.assertIn("To: Jane Smith", out)
        self.assertNotIn("John Doe", out)

    def test_range_command_empty_month(self):
        code, out = self._run(
            "range", "--inbox", str(self.inbox), "--category", "credits", "--month", "5", "--yes"
        )

        self.assertEqual(code, 0)
        self.assertIn("No transactions made in this month", out)

    def test_range_command_unreadable_inbox(self):
        self.inbox.write_text("not json", encoding="utf-8")
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            code, _ = self._run(
                "range", "--inbox", str(self.inbox), "--category", "debits", "--month", "all", "--yes"
            )

        self.assertEqual(code, 1)
        self.assertIn("Could not read messages", err.getvalue())


    def test_range_command_undecodable_inbox(self):
        self.inbox.write_bytes(b'[{"address":"B","body":"debited \xff","date":1}]')
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            code, _ = self._run(
                "range", "--inbox", str(self.inbox), "--category", "debits", "--month", "all", "--yes"
            )

        self.assertEqual(code, 1)
        self.assertIn("Could not read messages", err.getvalue())

if __name__ == "__main__":
    unittest.main()
