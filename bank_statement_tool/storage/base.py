"""
Storage interfaces - rule store and transaction history keyed by user id
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Iterable, List

from ..exceptions import StoreError

__all__ = ['RuleStore', 'TransactionHistory', 'StoreError', 'new_rule_document']

RULE_DEFAULTS = {
    'rule_name': '',
    'description': '',
    'keywords': [],
    'payee_contains': [],
    'description_contains': [],
    'amount_range': None,
    'target_category': None,
    'target_type': None,
    'confidence': 0.7,
    'training_count': 0,
    'success_rate': 1.0,
    'is_system_generated': False,
    'is_active': True,
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_rule_document(user_id: str, rule: Dict) -> Dict:
    """Fill defaults, id and timestamps for a rule about to be stored."""
    doc = {key: (list(value) if isinstance(value, list) else value)
           for key, value in RULE_DEFAULTS.items()}
    doc.update(rule)
    for key in ('keywords', 'payee_contains', 'description_contains'):
        doc[key] = [str(v).lower().strip() for v in (doc.get(key) or []) if str(v).strip()]
    doc['id'] = doc.get('id') or uuid.uuid4().hex
    doc['user_id'] = user_id
    doc['created_at'] = doc.get('created_at') or _now()
    doc['updated_at'] = doc['created_at']
    return doc


class RuleStore(ABC):
    """Classification rules owned by a user."""

    @abstractmethod
    def get_rules(self, user_id: str) -> List[Dict]:
        """All rules for the user, in creation order."""

    @abstractmethod
    def create_rule(self, user_id: str, rule: Dict) -> Dict:
        """Store a new rule and return it with its id."""

    @abstractmethod
    def update_rule(self, rule_id: str, user_id: str, updates: Dict) -> Dict:
        """Apply field updates to an existing rule and return it."""


class TransactionHistory(ABC):
    """Previously stored transactions of a user."""

    @abstractmethod
    def get_transactions(self, user_id: str, limit: int = 100) -> List[Dict]:
        """Most recent transactions first, at most `limit`."""

    @abstractmethod
    def add_transactions(self, user_id: str, transactions: Iterable[Dict]) -> int:
        """Append transactions to the user's history; returns the count added."""
