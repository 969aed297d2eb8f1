"""
Summary Generator - Totals, per-category and per-section breakdowns

Amounts accumulate as Decimal; rounding happens only in format_summary.
"""

from decimal import Decimal
from typing import Dict, Iterable

from ..classifiers.categories import UNCATEGORIZED

CENT = Decimal('0.01')
ZERO = Decimal('0')

UNCATEGORIZED_SECTION_CODE = 'uncategorized'
UNCATEGORIZED_SECTION_NAME = 'Uncategorized Section'


def _as_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class SummaryGenerator:
    """
    Aggregate a transaction list for reporting
    """

    def generate(self, transactions: Iterable[Dict]) -> Dict:
        """
        Summarize transactions

        Args:
            transactions: Transaction dicts (amount, type, category, section_code)

        Returns:
            Dict with total_transactions, total_income, total_expenses,
            net_income, category_summary, section_summary and needs_review
        """
        total_income = ZERO
        total_expenses = ZERO
        count = 0
        review_count = 0
        category_summary: Dict[str, Dict] = {}
        section_summary: Dict[str, Dict] = {}

        for txn in transactions:
            count += 1
            amount = _as_decimal(txn.get('amount'))
            txn_type = 'income' if txn.get('type') == 'income' else 'expense'
            if txn_type == 'income':
                total_income += amount
            else:
                total_expenses += amount

            category = txn.get('category') or UNCATEGORIZED
            cat = category_summary.setdefault(
                category, {'total': ZERO, 'count': 0, 'type': txn_type})
            cat['total'] += amount
            cat['count'] += 1

            code = txn.get('section_code') or UNCATEGORIZED_SECTION_CODE
            if code == UNCATEGORIZED_SECTION_CODE:
                name = UNCATEGORIZED_SECTION_NAME
            else:
                name = txn.get('section') or code
            sec = section_summary.setdefault(code, {'name': name, 'total': ZERO, 'count': 0})
            sec['total'] += amount
            sec['count'] += 1

            if txn.get('needs_review'):
                review_count += 1

        return {
            'total_transactions': count,
            'total_income': total_income,
            'total_expenses': total_expenses,
            'net_income': total_income - total_expenses,
            'category_summary': category_summary,
            'section_summary': section_summary,
            'needs_review': review_count,
        }


def format_summary(summary: Dict) -> Dict:
    """Round Decimal amounts to cents as floats for JSON output."""

    def money(value):
        return float(_as_decimal(value).quantize(CENT))

    return {
        'total_transactions': summary['total_transactions'],
        'total_income': money(summary['total_income']),
        'total_expenses': money(summary['total_expenses']),
        'net_income': money(summary['net_income']),
        'category_summary': {
            name: dict(entry, total=money(entry['total']))
            for name, entry in summary['category_summary'].items()
        },
        'section_summary': {
            code: dict(entry, total=money(entry['total']))
            for code, entry in summary['section_summary'].items()
        },
        'needs_review': summary['needs_review'],
    }
