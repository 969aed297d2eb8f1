"""
Bank Statement Tool
Parses bank statement text into transactions and classifies them for bookkeeping.
"""

import logging

from .exceptions import StatementError, StoreError, UnreadableStatementError

__version__ = '1.0.0'

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ['StatementError', 'StoreError', 'UnreadableStatementError', '__version__']
