"""
Classification Engine - Orchestrates user rules, keywords and history to
categorize transactions

Order of trust:
1. User rules - a rule above USER_RULE_SHORT_CIRCUIT decides on its own and
   history is never consulted
2. Built-in keywords (payee 0.7, description 0.5, amount heuristics 0.4)
3. Historical pattern (at most 0.8)
4. Combination - highest confidence wins, next three become suggestions
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from decimal import InvalidOperation
from typing import Dict, List, Optional

from ..config import (CLASSIFY_WORKERS, CONFIDENCE_HIGH, CONFIDENCE_LOW, CONFIDENCE_MEDIUM,
                      FALLBACK_CONFIDENCE, USER_RULE_SHORT_CIRCUIT)
from ..exceptions import StoreError
from ..storage.base import RuleStore, TransactionHistory
from .categories import COMMON_SUGGESTIONS, UNCATEGORIZED
from .history_matcher import HistoryMatcher
from .keyword_classifier import KeywordClassifier
from .rule_matcher import RuleMatcher

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 3


class ClassificationEngine:
    """
    Main classification engine. Deterministic for a given rule set, keyword
    table and history.
    """

    def __init__(self, rule_store: RuleStore, history: TransactionHistory,
                 keyword_classifier: Optional[KeywordClassifier] = None,
                 rule_matcher: Optional[RuleMatcher] = None,
                 history_matcher: Optional[HistoryMatcher] = None,
                 short_circuit: float = USER_RULE_SHORT_CIRCUIT):
        self.rule_store = rule_store
        self.keyword_classifier = keyword_classifier or KeywordClassifier()
        self.rule_matcher = rule_matcher or RuleMatcher()
        self.history_matcher = history_matcher or HistoryMatcher(history)
        self.short_circuit = short_circuit

    def classify(self, transaction: Dict, user_id: str,
                 rules: Optional[List[Dict]] = None) -> Dict:
        """
        Classify one transaction

        Args:
            transaction: Dict with payee, description, amount and type
            user_id: Owner of rules and history
            rules: Pre-fetched rules; read from the rule store when None

        Returns:
            {'category', 'confidence', 'method', 'suggestions', ...} plus
            rule_id/matched_keywords when a rule or keyword decided
        """
        try:
            if rules is None:
                rules = self.rule_store.get_rules(user_id)

            rule_result = self.rule_matcher.match(transaction, rules)
            if rule_result['confidence'] > self.short_circuit:
                return dict(rule_result, suggestions=[])

            keyword_result = self.keyword_classifier.classify(transaction)
            history_result = self.history_matcher.match(transaction, user_id)
        except StoreError as e:
            logger.warning("Classification store error for user %s: %s", user_id, e)
            return self._error_fallback()
        except (TypeError, ValueError, InvalidOperation) as e:
            # malformed rule or transaction fields only affect this transaction
            logger.warning("Could not classify %r: %s", transaction.get('payee'), e)
            return self._error_fallback()

        return self.combine([rule_result, keyword_result, history_result])

    def _error_fallback(self) -> Dict:
        return {
            'category': UNCATEGORIZED,
            'confidence': FALLBACK_CONFIDENCE,
            'method': 'error_fallback',
            'suggestions': [],
        }

    def combine(self, candidates: List[Dict]) -> Dict:
        """Pick the most confident candidate; the runners-up become suggestions."""
        valid = [c for c in candidates if c.get('confidence', 0) > 0]
        if not valid:
            return {
                'category': UNCATEGORIZED,
                'confidence': FALLBACK_CONFIDENCE,
                'method': 'no_valid_classification',
                'suggestions': [
                    {'category': c, 'confidence': FALLBACK_CONFIDENCE, 'method': 'common_suggestion'}
                    for c in COMMON_SUGGESTIONS
                ],
            }

        # stable sort: on equal confidence rules beat keywords beat history
        ranked = sorted(valid, key=lambda c: -c['confidence'])
        best = dict(ranked[0])
        best['suggestions'] = [
            {'category': c['category'], 'confidence': c['confidence'], 'method': c['method']}
            for c in ranked[1:1 + MAX_SUGGESTIONS]
        ]
        return best

    def classify_batch(self, transactions: List[Dict], user_id: str,
                       max_workers: Optional[int] = None) -> List[Dict]:
        """
        Classify many transactions; results keep the input order

        Args:
            transactions: Transaction dicts
            user_id: Owner of rules and history
            max_workers: Worker threads (defaults to CLASSIFY_WORKERS; 1 = sequential)

        Returns:
            One classification result per transaction
        """
        try:
            rules = self.rule_store.get_rules(user_id)
        except StoreError as e:
            # each transaction retries and downgrades on its own
            logger.warning("Could not prefetch rules for user %s: %s", user_id, e)
            rules = None

        workers = max_workers or CLASSIFY_WORKERS
        if workers <= 1 or len(transactions) < 2:
            return [self.classify(t, user_id, rules) for t in transactions]

        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(lambda t: self.classify(t, user_id, rules), transactions))

    def classify_transactions(self, transactions: List[Dict], user_id: str,
                              max_workers: Optional[int] = None) -> List[Dict]:
        """Classify and return updated copies of the transactions."""
        results = self.classify_batch(transactions, user_id, max_workers=max_workers)
        return [self.apply_classification(t, r) for t, r in zip(transactions, results)]

    @staticmethod
    def apply_classification(transaction: Dict, result: Dict) -> Dict:
        """Copy of the transaction carrying the classification result."""
        updated = dict(transaction)
        updated['category'] = result['category']
        updated['confidence'] = result['confidence']
        updated['classification_method'] = result['method']
        updated['suggestions'] = list(result.get('suggestions', []))
        if result.get('rule_id'):
            updated['rule_id'] = result['rule_id']
        updated['needs_review'] = (result['category'] == UNCATEGORIZED
                                   or not updated.get('payee'))
        return updated

    @staticmethod
    def get_confidence_level(confidence: float) -> str:
        """Convert confidence score to level"""
        if confidence >= CONFIDENCE_HIGH:
            return 'high'
        elif confidence >= CONFIDENCE_MEDIUM:
            return 'medium'
        elif confidence >= CONFIDENCE_LOW:
            return 'low'
        return 'none'

    def get_summary(self, results: List[Dict]) -> Dict:
        """Get summary statistics for classification results"""
        summary = {
            'total': len(results),
            'by_confidence': {'high': 0, 'medium': 0, 'low': 0, 'none': 0},
            'by_method': {},
            'uncategorized': 0,
        }
        for result in results:
            level = self.get_confidence_level(result.get('confidence', 0))
            summary['by_confidence'][level] += 1
            method = result.get('method', 'none')
            summary['by_method'][method] = summary['by_method'].get(method, 0) + 1
            if result.get('category') == UNCATEGORIZED:
                summary['uncategorized'] += 1
        return summary
