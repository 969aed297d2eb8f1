"""
History Matcher Module - Category by majority vote of the user's own
manually reviewed transactions with a similar payee
"""

import logging
from typing import Dict

from ..config import HISTORY_LIMIT, HISTORY_MAX_CONFIDENCE
from ..storage.base import TransactionHistory
from .categories import UNCATEGORIZED

logger = logging.getLogger(__name__)


class HistoryMatcher:
    """
    Match transactions based on historical patterns
    """

    def __init__(self, history: TransactionHistory, limit: int = HISTORY_LIMIT):
        self.history = history
        self.limit = limit

    def match(self, transaction: Dict, user_id: str) -> Dict:
        """
        Find the plurality category among similar reviewed transactions

        Args:
            transaction: Dict with a payee
            user_id: Owner of the history

        Returns:
            Result with category, confidence, method, historical_count and
            total_similar; confidence 0 when there is no usable history

        Raises:
            StoreError: history could not be read
        """
        payee = (transaction.get('payee') or '').lower().strip()
        if not payee:
            return self._no_match('no_payee')

        similar = []
        for past in self.history.get_transactions(user_id, limit=self.limit):
            past_payee = (past.get('payee') or '').lower().strip()
            if past_payee and (past_payee in payee or payee in past_payee):
                similar.append(past)

        if not similar:
            return self._no_match('no_historical_data')

        # insertion order makes ties go to the first category seen
        counts: Dict[str, int] = {}
        for past in similar:
            if past.get('category') and past.get('is_manually_reviewed'):
                counts[past['category']] = counts.get(past['category'], 0) + 1

        if not counts:
            return self._no_match('no_reviewed_historical_data')

        category, count = max(counts.items(), key=lambda item: item[1])
        confidence = min(HISTORY_MAX_CONFIDENCE, count / len(similar))
        logger.debug("History match for %r: %s (%d/%d)", payee, category, count, len(similar))
        return {
            'category': category,
            'confidence': round(confidence, 4),
            'method': 'historical_pattern',
            'historical_count': count,
            'total_similar': len(similar),
        }

    def _no_match(self, method: str) -> Dict:
        return {'category': UNCATEGORIZED, 'confidence': 0.0, 'method': method}
