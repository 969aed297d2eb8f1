"""
History Loader - Import reviewed transactions from a ledger export (CSV/Excel)

Used to bootstrap classification history and rule training from bookkeeping
already done by hand.
"""

import logging
import os
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

import pandas as pd

from ..classifiers.categories import category_type, is_known_category
from ..parsers.utils import CENT, extract_payee, normalize_whitespace

logger = logging.getLogger(__name__)

# Map common column names
COLUMN_MAP = {
    'date': ['date', 'trans date', 'transaction date', 'posting date'],
    'description': ['description', 'narration', 'memo', 'details'],
    'payee': ['payee', 'vendor', 'name', 'merchant'],
    'amount': ['amount', 'debit', 'credit'],
    'category': ['category', 'account', 'account name', 'classification'],
    'type': ['type', 'transaction type', 'direction'],
}


def _find_columns(columns) -> Dict[str, str]:
    actual = {}
    for target, options in COLUMN_MAP.items():
        for col in columns:
            if str(col).lower().strip() in options:
                actual[target] = col
                break
    return actual


def _cell(row, col: Optional[str]) -> str:
    if col is None:
        return ''
    value = row.get(col)
    if value is None or pd.isna(value):
        return ''
    return str(value).strip()


def load_reviewed_history(file_path: str) -> List[Dict]:
    """
    Load a ledger export as manually reviewed transactions

    Args:
        file_path: .csv, .xlsx or .xls file with at least description (or
            payee) and category columns

    Returns:
        Transaction dicts with is_manually_reviewed True

    Raises:
        ValueError: required columns are missing
    """
    if file_path.lower().endswith('.csv'):
        df = pd.read_csv(file_path)
    else:
        df = pd.read_excel(file_path)

    cols = _find_columns(df.columns)
    if 'category' not in cols or not ('description' in cols or 'payee' in cols):
        raise ValueError("%s needs a category column and a description or payee column"
                         % os.path.basename(file_path))

    records = []
    for _, row in df.iterrows():
        category = _cell(row, cols.get('category'))
        description = normalize_whitespace(_cell(row, cols.get('description')))
        payee = _cell(row, cols.get('payee')) or extract_payee(description)
        if not category or not (description or payee):
            continue

        try:
            raw_amount = Decimal(_cell(row, cols.get('amount')).replace('$', '').replace(',', '') or '0')
        except InvalidOperation:
            raw_amount = Decimal('0')

        # ledger exports usually list expenses as positive amounts
        txn_type = _cell(row, cols.get('type')).lower()
        if txn_type not in ('income', 'expense'):
            txn_type = category_type(category)
        if not is_known_category(category):
            logger.debug("Ledger category %r is not a Schedule C category", category)

        date_value = pd.to_datetime(_cell(row, cols.get('date')) or None, errors='coerce')
        records.append({
            'date': None if pd.isna(date_value) else date_value.date().isoformat(),
            'description': description or payee,
            'payee': normalize_whitespace(payee),
            'amount': abs(raw_amount).quantize(CENT),
            'type': txn_type,
            'category': category,
            'section': 'Manual Entry',
            'section_code': 'manual',
            'is_manually_reviewed': True,
            'needs_review': False,
            'source': 'ledger_import',
        })

    logger.info("Loaded %d reviewed transactions from %s", len(records),
                os.path.basename(file_path))
    return records
