"""Exceptions raised by the bank statement tool."""


class StatementError(Exception):
    """A statement could not be processed at all."""


class UnreadableStatementError(StatementError):
    """Source text is missing, empty or corrupted."""


class StoreError(Exception):
    """The rule store or transaction history could not be read or written."""
