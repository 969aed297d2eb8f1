"""
Storage Package - Rule store and transaction history adapters
"""

from .base import RuleStore, StoreError, TransactionHistory
from .memory_store import InMemoryStore
from .mongo_store import MongoStore

__all__ = ['RuleStore', 'TransactionHistory', 'StoreError', 'InMemoryStore', 'MongoStore']
