"""
Rule Matcher - Score a transaction against the user's classification rules
"""

from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from ..config import RULE_WEIGHTS
from .categories import UNCATEGORIZED

NO_MATCH = {'category': UNCATEGORIZED, 'confidence': 0.0, 'method': 'user_rule_no_match'}


def _decimal(value) -> Optional[Decimal]:
    if value is None or value == '':
        return None
    try:
        amount = abs(Decimal(str(value).replace('$', '').replace(',', '').strip()))
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


def _ratio(value, default: float) -> float:
    """Rule confidence or success rate clamped to [0, 1]; default when missing or bad."""
    if value is None or value == '':
        return default
    try:
        return min(1.0, max(0.0, float(value)))
    except (TypeError, ValueError):
        return default


class RuleMatcher:
    """
    Weighted rule matching: payee 0.4, description 0.3, amount range 0.2.

    A rule's confidence is its score divided by the weight of the criteria it
    defines, scaled by the rule's own confidence and success rate. A rule that
    only lists payees therefore reaches its full confidence on a payee hit.
    """

    def __init__(self, weights: Optional[Dict[str, float]] = None):
        self.weights = dict(weights or RULE_WEIGHTS)

    def match(self, transaction: Dict, rules: List[Dict]) -> Dict:
        """
        Best matching active rule

        Args:
            transaction: Dict with payee, description and amount
            rules: The user's rules, in priority order

        Returns:
            Rule result (category, type, confidence, method, rule_id,
            rule_name, matched_keywords), or a zero-confidence no-match
        """
        payee = (transaction.get('payee') or '').lower()
        description = (transaction.get('description') or '').lower()
        amount = _decimal(transaction.get('amount'))

        best = dict(NO_MATCH)
        for rule in rules or []:
            if not rule.get('is_active', True) or not rule.get('target_category'):
                continue
            confidence, matched = self.score(rule, payee, description, amount)
            if confidence > best['confidence']:
                best = {
                    'category': rule['target_category'],
                    'type': rule.get('target_type'),
                    'confidence': confidence,
                    'method': 'user_rule',
                    'rule_id': rule.get('id'),
                    'rule_name': rule.get('rule_name', ''),
                    'matched_keywords': matched,
                }
        return best

    def score(self, rule: Dict, payee: str, description: str,
              amount: Optional[Decimal]):
        """(confidence, matched terms) of one rule against lowercased text."""
        defined = 0.0
        score = 0.0
        matched: List[str] = []

        payee_terms = [t.lower() for t in rule.get('payee_contains') or [] if t]
        keywords = [t.lower() for t in rule.get('keywords') or [] if t]
        desc_terms = [t.lower() for t in rule.get('description_contains') or [] if t]

        # keywords stand in for payee terms and may hit payee or description
        if payee_terms or keywords:
            defined += self.weights['payee']
            hits = [t for t in payee_terms + keywords if payee and t in payee]
            if not hits and not payee_terms:
                hits = [t for t in keywords if description and t in description]
            if hits:
                score += self.weights['payee']
                matched.extend(hits)

        if desc_terms:
            defined += self.weights['description']
            hits = [t for t in desc_terms if description and t in description]
            if hits:
                score += self.weights['description']
                matched.extend(hits)

        amount_range = rule.get('amount_range') or {}
        low, high = _decimal(amount_range.get('min')), _decimal(amount_range.get('max'))
        if low is not None or high is not None:
            defined += self.weights['amount']
            if (amount is not None and (low is None or amount >= low)
                    and (high is None or amount <= high)):
                score += self.weights['amount']

        if score == 0 or defined == 0:
            return 0.0, []

        confidence = ((score / defined) * _ratio(rule.get('confidence'), 0.0)
                      * _ratio(rule.get('success_rate'), 1.0))
        return round(min(1.0, confidence), 4), matched
