"""
In-process rule store and transaction history
"""

import copy
import threading
from collections import defaultdict
from typing import Dict, Iterable, List

from .base import RuleStore, StoreError, TransactionHistory, _now, new_rule_document


class InMemoryStore(RuleStore, TransactionHistory):
    """
    Dict-backed store for tests and one-off CLI runs. Returns copies so
    callers never mutate stored records.
    """

    def __init__(self):
        self._rules: Dict[str, List[Dict]] = defaultdict(list)
        self._transactions: Dict[str, List[Dict]] = defaultdict(list)
        self._lock = threading.Lock()

    def get_rules(self, user_id: str) -> List[Dict]:
        with self._lock:
            return copy.deepcopy(self._rules.get(user_id, []))

    def create_rule(self, user_id: str, rule: Dict) -> Dict:
        doc = new_rule_document(user_id, rule)
        with self._lock:
            self._rules[user_id].append(doc)
            return copy.deepcopy(doc)

    def update_rule(self, rule_id: str, user_id: str, updates: Dict) -> Dict:
        with self._lock:
            for rule in self._rules.get(user_id, []):
                if rule['id'] == rule_id:
                    rule.update(updates)
                    rule['updated_at'] = _now()
                    return copy.deepcopy(rule)
        raise StoreError("Rule %s not found for user %s" % (rule_id, user_id))

    def get_transactions(self, user_id: str, limit: int = 100) -> List[Dict]:
        with self._lock:
            history = self._transactions.get(user_id, [])
            return copy.deepcopy(list(reversed(history))[:limit])

    def add_transactions(self, user_id: str, transactions: Iterable[Dict]) -> int:
        added = [copy.deepcopy(t) for t in transactions]
        with self._lock:
            self._transactions[user_id].extend(added)
        return len(added)
