"""Transaction extraction module."""
from .patterns import MessageKind, TransactionPattern, PATTERNS
from .extractor import TransactionExtractor

__all__ = ["MessageKind", "TransactionPattern", "PATTERNS", "TransactionExtractor"]
