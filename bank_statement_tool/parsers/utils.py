"""
Parsing primitives - amount, date and payee normalization shared by every
statement grammar, plus the single constructor for transaction records.
"""

import logging
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional, Union

from ..classifiers.categories import UNCATEGORIZED
from ..config import DATE_FORMATS_TO_TRY, MAX_TRANSACTION_AMOUNT, PAYEE_MAX_LENGTH

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
MAX_AMOUNT = Decimal(MAX_TRANSACTION_AMOUNT)

INCOME = 'income'
EXPENSE = 'expense'

SOURCE_STATEMENT = 'statement_text'

# Provenance tags
SECTION_NAMES = {
    'deposits': 'Deposits and Additions',
    'checks': 'Checks Paid',
    'card': 'ATM & Debit Card Withdrawals',
    'electronic': 'Electronic Withdrawals',
    'fallback': 'Fallback Scan',
    'manual': 'Manual Entry',
    'uncategorized': 'Uncategorized Section',
}
SECTION_TYPES = {
    'deposits': INCOME,
    'checks': EXPENSE,
    'card': EXPENSE,
    'electronic': EXPENSE,
}
DEFAULT_SECTION = 'uncategorized'

_AMOUNT_RE = re.compile(r'^\d+(?:\.\d{1,2})?$')
_MMDD_RE = re.compile(r'^\s*(\d{1,2})[/-](\d{1,2})\s*$')
_WS_RE = re.compile(r'\s+')

_CHECK_DESC_RE = re.compile(r'^check\s*#?\s*\d+$', re.IGNORECASE)
_PAYEE_PREFIX_RE = re.compile(r'^(?:DEBIT|CREDIT|CHECK|DEPOSIT|WITHDRAWAL)\s+', re.IGNORECASE)
_PAYEE_SUFFIX_RE = re.compile(r'\s+(?:DEBIT|CREDIT|DEPOSIT|WITHDRAWAL)$', re.IGNORECASE)
_LEADING_ID_RE = re.compile(r'^#?\d+\s+')
_TRAILING_DATE_RE = re.compile(r'\s+\d{1,2}/\d{1,2}$')
_NO_SUBJECT_RE = re.compile(r'^[\d\W_]*$')
_PAYEE_SEPARATORS = (' - ', ' / ', ' * ', '  ')


# =========================================================================
# AMOUNTS
# =========================================================================

def parse_amount(text: Union[str, Decimal, None]) -> Optional[Decimal]:
    """
    Parse a statement amount such as "$1,234.56" or "2500".

    Returns:
        Decimal quantized to cents, or None when the text is not an amount or
        falls outside 0 < amount <= MAX_TRANSACTION_AMOUNT.
    """
    if text is None:
        return None
    cleaned = str(text).strip().replace('$', '').replace(',', '').strip()
    if not cleaned:
        return None
    if '.' not in cleaned:
        cleaned += '.00'
    if not _AMOUNT_RE.match(cleaned):
        logger.debug("Rejected amount %r: not numeric", text)
        return None
    try:
        amount = Decimal(cleaned).quantize(CENT)
    except InvalidOperation:
        return None
    if amount <= 0 or amount > MAX_AMOUNT:
        logger.debug("Rejected amount %r: out of range", text)
        return None
    return amount


# =========================================================================
# DATES
# =========================================================================

def to_iso_date(mmdd: str, year: int) -> Optional[str]:
    """Convert "MM/DD" (or "MM-DD") plus a year to "YYYY-MM-DD"; None if invalid."""
    match = _MMDD_RE.match(mmdd or '')
    if not match:
        return None
    month, day = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or not 1 <= day <= 31:
        logger.debug("Rejected date %r: month/day out of range", mmdd)
        return None
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        logger.debug("Rejected date %r: not a calendar date in %s", mmdd, year)
        return None


def iso_to_mmdd(iso_date: str) -> str:
    return '%s/%s' % (iso_date[5:7], iso_date[8:10])


def infer_year(period, today: Optional[date] = None) -> int:
    """
    Year used to resolve MM/DD transaction dates.

    Taken from the statement period end date. Statements that span
    December to January resolve every date into the end year.

    Args:
        period: {'start': ..., 'end': ...} dict, an end-date string, or None
        today: reference date for the current-year fallback

    Returns:
        Four digit year
    """
    if isinstance(period, dict):
        end = period.get('end') or ''
    else:
        end = period or ''
    end = str(end).strip()

    if end:
        for fmt in DATE_FORMATS_TO_TRY:
            try:
                return datetime.strptime(end, fmt).year
            except ValueError:
                continue
        match = re.search(r'\b(\d{4})\b', end)
        if match:
            return int(match.group(1))
        match = re.search(r'/(\d{2})$', end)
        if match:
            return 2000 + int(match.group(1))

    return (today or date.today()).year


# =========================================================================
# TEXT
# =========================================================================

def normalize_whitespace(text: Optional[str]) -> str:
    return _WS_RE.sub(' ', text or '').strip()


def extract_payee(description: Optional[str]) -> str:
    """
    Best-effort payee from a raw description.

    Returns '' when no subject remains (numbered checks, bare IDs).
    """
    if not description:
        return ''
    text = description.strip()
    if _CHECK_DESC_RE.match(text):
        return ''

    text = _PAYEE_PREFIX_RE.sub('', text)
    text = _PAYEE_SUFFIX_RE.sub('', text)
    text = _LEADING_ID_RE.sub('', text)
    text = _TRAILING_DATE_RE.sub('', text)

    cut = len(text)
    for sep in _PAYEE_SEPARATORS:
        idx = text.find(sep)
        if idx > 0:
            cut = min(cut, idx)
    text = normalize_whitespace(text[:cut])

    if _NO_SUBJECT_RE.match(text):
        return ''
    return text[:PAYEE_MAX_LENGTH].strip()


def needs_review(transaction: Dict) -> bool:
    return (transaction.get('category') or UNCATEGORIZED) == UNCATEGORIZED or not transaction.get('payee')


# =========================================================================
# TRANSACTION RECORDS
# =========================================================================

def build_transaction(mmdd: str, year: int, description: str, amount,
                      section_code: str = DEFAULT_SECTION, payee: Optional[str] = None,
                      txn_type: Optional[str] = None,
                      check_number: Optional[str] = None) -> Optional[Dict]:
    """
    Validate a parsed line and build a transaction record.

    Args:
        mmdd: "MM/DD" date from the statement line
        year: statement year
        description: raw description text
        amount: amount text or Decimal
        section_code: provenance tag (see SECTION_NAMES)
        payee: explicit payee; derived from the description when None
        txn_type: 'income' or 'expense'; derived from the section when None
        check_number: check number for check-section records

    Returns:
        Transaction dict, or None when the date or amount is rejected
    """
    iso_date = to_iso_date(mmdd, year)
    if iso_date is None:
        return None

    value = amount if isinstance(amount, Decimal) else parse_amount(amount)
    if value is None or value <= 0 or value > MAX_AMOUNT:
        return None

    clean_desc = normalize_whitespace(description)
    if not clean_desc:
        return None

    if section_code not in SECTION_NAMES:
        section_code = DEFAULT_SECTION

    txn = {
        'date': iso_date,
        'amount': value.quantize(CENT),
        'description': clean_desc,
        'payee': normalize_whitespace(extract_payee(description) if payee is None else payee),
        'type': txn_type or SECTION_TYPES.get(section_code, EXPENSE),
        'category': UNCATEGORIZED,
        'confidence': 0.0,
        'section': SECTION_NAMES[section_code],
        'section_code': section_code,
        'source': SOURCE_STATEMENT,
        'is_manually_reviewed': False,
    }
    if check_number:
        txn['check_number'] = check_number
    txn['needs_review'] = needs_review(txn)
    return txn


def transaction_key(txn: Dict):
    """Deduplication key: (date, amount, description)."""
    return (txn.get('date'), txn.get('amount'), txn.get('description'))
