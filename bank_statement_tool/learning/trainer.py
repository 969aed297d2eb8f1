"""
Rule Trainer - Promote repeated manual corrections into user rules

A payee reviewed into the same category at least MIN_TRAINING_GROUP times
becomes a system-generated rule, or strengthens the rule that already
covers it. Store errors are not caught: training is an explicit user action
and must not half-succeed silently.
"""

import logging
from typing import Dict, List, Optional

from ..classifiers.categories import UNCATEGORIZED
from ..config import (MIN_TRAINING_GROUP, NEW_RULE_CONFIDENCE, RULE_CONFIDENCE_CAP,
                      RULE_CONFIDENCE_STEP)
from ..storage.base import RuleStore

logger = logging.getLogger(__name__)


class RuleTrainer:
    """
    Learn classification rules from manually reviewed transactions
    """

    def __init__(self, rule_store: RuleStore, min_group_size: int = MIN_TRAINING_GROUP):
        self.rule_store = rule_store
        self.min_group_size = min_group_size

    def train(self, transactions: List[Dict], user_id: str) -> Dict:
        """
        Create or strengthen rules from reviewed transactions

        Args:
            transactions: Transactions, reviewed or not
            user_id: Owner of the rules

        Returns:
            {'rules_created', 'rules_updated', 'transactions_processed',
             'payees_analyzed'}

        Raises:
            StoreError: the rule store could not be read or written
        """
        groups = self._group(transactions)
        created = 0
        updated = 0

        if any(len(m) >= self.min_group_size for cats in groups.values() for m in cats.values()):
            rules = self.rule_store.get_rules(user_id)
            for payee, by_category in groups.items():
                for category, members in by_category.items():
                    if len(members) < self.min_group_size:
                        continue
                    existing = self._find_rule(rules, payee, category)
                    if existing:
                        self._strengthen(existing, len(members), user_id)
                        updated += 1
                    else:
                        rules.append(self._create(payee, category, members, user_id))
                        created += 1

        logger.info("Training for %s: %d rules created, %d updated from %d payees",
                    user_id, created, updated, len(groups))
        return {
            'rules_created': created,
            'rules_updated': updated,
            'transactions_processed': len(transactions),
            'payees_analyzed': len(groups),
        }

    def _group(self, transactions: List[Dict]) -> Dict[str, Dict[str, List[Dict]]]:
        """payee -> category -> reviewed transactions"""
        groups: Dict[str, Dict[str, List[Dict]]] = {}
        for txn in transactions:
            category = txn.get('category')
            if not txn.get('is_manually_reviewed') or not category or category == UNCATEGORIZED:
                continue
            payee = (txn.get('payee') or '').lower().strip()
            if not payee:
                continue
            groups.setdefault(payee, {}).setdefault(category, []).append(txn)
        return groups

    def _find_rule(self, rules: List[Dict], payee: str, category: str) -> Optional[Dict]:
        for rule in rules:
            if rule.get('target_category') != category:
                continue
            terms = (rule.get('payee_contains') or []) + (rule.get('keywords') or [])
            if any(str(t).lower().strip() == payee for t in terms):
                return rule
        return None

    def _strengthen(self, rule: Dict, group_size: int, user_id: str):
        # one assumed miss keeps the recomputed rate below 1.0
        success_rate = group_size / (group_size + 1)
        updates = {
            'training_count': rule.get('training_count', 0) + group_size,
            'success_rate': max(success_rate, rule.get('success_rate', 0)),
            'confidence': round(min(RULE_CONFIDENCE_CAP,
                                    rule.get('confidence', 0) + RULE_CONFIDENCE_STEP), 4),
        }
        self.rule_store.update_rule(rule['id'], user_id, updates)
        rule.update(updates)

    def _create(self, payee: str, category: str, members: List[Dict], user_id: str) -> Dict:
        return self.rule_store.create_rule(user_id, {
            'rule_name': 'Auto-generated rule for %s' % payee,
            'description': 'Automatically classifies transactions from %s as %s' % (payee, category),
            'payee_contains': [payee],
            'description_contains': [],
            'target_category': category,
            'target_type': members[0].get('type'),
            'confidence': NEW_RULE_CONFIDENCE,
            'training_count': len(members),
            'success_rate': 1.0,
            'is_system_generated': True,
            'is_active': True,
        })
