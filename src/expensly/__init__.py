"""Expensly: bank SMS transaction tracker."""

__version__ = "1.0.0"
