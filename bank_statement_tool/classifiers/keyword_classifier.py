"""
Keyword Classifier Module - Classify transactions using the built-in
category -> keyword table, plus two narrow amount heuristics.
"""

import json
import logging
import os
import re
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from ..config import (DESCRIPTION_KEYWORD_CONFIDENCE, HEURISTIC_CONFIDENCE, HEURISTIC_THRESHOLD,
                      KEYWORD_PAYEE_PRECEDENCE, KEYWORDS_FILE, PAYEE_KEYWORD_CONFIDENCE)
from . import categories as cat

logger = logging.getLogger(__name__)

DEFAULT_KEYWORDS = {
    cat.ADVERTISING: [
        'google ads', 'facebook ads', 'instagram ads', 'linkedin ads', 'twitter ads',
        'advertising', 'marketing', 'promotion', 'billboard', 'radio ad', 'tv ad',
        'newspaper ad', 'magazine ad', 'flyer', 'brochure', 'business card',
        'website promotion', 'seo', 'sem', 'social media marketing',
    ],
    cat.CAR_TRUCK_EXPENSES: [
        'gas station', 'fuel', 'gasoline', 'diesel', 'auto repair', 'car wash',
        'oil change', 'tire', 'brake', 'battery', 'mechanic', 'auto parts',
        'vehicle maintenance', 'car insurance', 'registration', 'dmv',
        'parking', 'toll', 'uber', 'lyft', 'taxi', 'rental car',
        # gas station brands
        'shell', 'exxon', 'mobil', 'chevron', 'bp', 'arco', 'texaco',
        'phillips 66', 'marathon', 'valero', 'speedway', 'wawa', 'sunshine',
    ],
    cat.OFFICE_EXPENSES: [
        'office supplies', 'staples', 'office depot', 'officemax', 'best buy', 'amazon',
        'printer', 'ink', 'toner', 'paper', 'pen', 'pencil', 'notebook',
        'folder', 'binder', 'calculator', 'desk', 'chair', 'computer',
        'monitor', 'keyboard', 'mouse', 'software', 'microsoft office',
        'adobe', 'printer paper', 'envelopes', 'stamps', 'ups store', 'fedex office',
    ],
    cat.LEGAL_PROFESSIONAL: [
        'attorney', 'lawyer', 'legal', 'law firm', 'court', 'legal fees',
        'consultation', 'accountant', 'cpa', 'bookkeeper', 'tax prep',
        'consultant', 'business advisor', 'professional services',
        'notary', 'paralegal', 'contract review',
    ],
    cat.UTILITIES: [
        'electric', 'electricity', 'gas bill', 'water', 'sewer', 'trash',
        'internet', 'phone', 'cell phone', 'telephone', 'wifi',
        'cable', 'satellite', 'utility', 'power company', 'energy',
        'pg&e', 'con edison', 'duke energy', 'georgia power', 'florida power',
        'verizon', 'at&t', 'comcast', 'xfinity', 'spectrum', 'westar',
    ],
    cat.RENT_LEASE_OTHER: [
        'rent', 'lease', 'rental', 'property management', 'landlord',
        'office rent', 'warehouse rent', 'storage unit', 'co-working space',
    ],
    cat.INSURANCE_OTHER: [
        'insurance', 'liability insurance', 'business insurance',
        'property insurance', 'general liability', 'professional liability',
        'errors and omissions', 'workers comp', 'disability insurance',
    ],
    cat.MEALS_ENTERTAINMENT: [
        'restaurant', 'coffee', 'lunch', 'dinner', 'catering', 'food',
        'business meal', 'client dinner', 'conference meal', 'starbucks',
        'mcdonalds', 'subway', 'pizza', 'entertainment', 'tickets',
        'event', 'conference', 'seminar', 'business entertainment',
    ],
    cat.TRAVEL: [
        'hotel', 'motel', 'airbnb', 'airline', 'flight', 'airport',
        'taxi', 'uber', 'lyft', 'rental car', 'train', 'bus',
        'business travel', 'conference travel', 'mileage', 'lodging',
        'accommodation', 'travel expense',
    ],
    cat.SUPPLIES: [
        'supplies', 'materials', 'inventory', 'parts', 'components',
        'raw materials', 'production supplies', 'manufacturing supplies',
        'tools', 'equipment supplies', 'cleaning supplies', 'safety supplies',
        'home depot', "lowe's", 'lowes', 'menards',
    ],
    cat.INTEREST_OTHER: [
        'interest', 'loan interest', 'credit card interest', 'line of credit',
        'business loan', 'equipment loan', 'financing charges',
        'late fees', 'penalty',
    ],
    cat.REPAIRS_MAINTENANCE: [
        'repair', 'maintenance', 'fix', 'service', 'hvac', 'plumbing',
        'electrical', 'cleaning', 'janitorial', 'landscaping',
        'snow removal', 'pest control', 'security system',
        'equipment repair', 'building maintenance',
    ],
    cat.WAGES: [
        'payroll', 'salary', 'wages', 'employee', 'staff', 'worker',
        'compensation', 'bonus', 'overtime', 'commission', 'tip',
        'adp', 'paychex', 'quickbooks payroll', 'gusto',
    ],
    cat.TAXES_LICENSES: [
        'payroll tax', 'fica', 'social security', 'medicare', 'unemployment tax',
        'futa', 'suta', 'state unemployment', 'federal unemployment',
        'withholding', 'employer tax',
        'tax', 'taxes', 'irs', 'state tax', 'local tax', 'sales tax',
        'license', 'permit', 'registration', 'business license',
        'professional license', 'city license', 'county tax',
        'property tax', 'franchise tax',
    ],
    cat.GROSS_RECEIPTS: [
        'payment', 'invoice', 'sale', 'revenue', 'income', 'receipt',
        'deposit', 'cash sale', 'credit card sale', 'check payment',
        'client payment', 'customer payment', 'stripe', 'paypal', 'square',
    ],
    cat.OTHER_INCOME: [
        'interest payment', 'interest earned', 'refund', 'rebate', 'reimbursement',
    ],
    cat.CONTRACT_LABOR: [
        'contractor', 'freelancer', 'consultant', 'independent contractor',
        '1099', 'subcontractor', 'vendor', 'service provider',
        'temporary worker', 'contract work',
    ],
    cat.COMMISSIONS_FEES: [
        'commission', 'fee', 'service fee', 'processing fee', 'transaction fee',
        'bank fee', 'credit card fee', 'paypal fee', 'stripe fee',
        'merchant fee', 'broker fee', 'agent fee', 'service charge',
    ],
    cat.PERSONAL_EXPENSE: [
        'personal', 'grocery', 'clothing', 'entertainment', 'vacation',
        'personal care', 'medical', 'dental', 'pharmacy', 'gym',
        'fitness', 'hobby', 'personal shopping', 'home improvement',
    ],
}


def _freeze(table: Mapping[str, List[str]]) -> Mapping[str, Tuple[str, ...]]:
    return MappingProxyType({
        category: tuple(k.lower().strip() for k in keywords if k and k.strip())
        for category, keywords in table.items()
    })


def load_keyword_table(path: Optional[str] = None) -> Mapping[str, Tuple[str, ...]]:
    """
    Load the category -> keywords table

    Args:
        path: JSON file {category: [keywords]}; defaults to DATA_DIR/keywords.json

    Returns:
        Read-only mapping; the built-in table when no file exists
    """
    path = path or KEYWORDS_FILE
    if os.path.exists(path):
        with open(path, 'r', encoding='utf-8') as f:
            table = json.load(f)
        if not isinstance(table, dict):
            raise ValueError("Keyword file %s must contain a JSON object" % path)
        logger.info("Loaded %d keyword categories from %s", len(table), path)
        return _freeze(table)
    return _freeze(DEFAULT_KEYWORDS)


def _amount_value(amount) -> Decimal:
    """Absolute amount; zero when missing or not a number (e.g. "$5.00" is 5)."""
    text = str(amount).replace('$', '').replace(',', '').strip() if amount is not None else ''
    try:
        value = abs(Decimal(text)) if text else Decimal('0')
    except InvalidOperation:
        return Decimal('0')
    return value if value.is_finite() else Decimal('0')


class KeywordClassifier:
    """
    Classify transactions based on keyword matching

    Payee hits score 0.7, description hits 0.5. Income transactions only
    match income categories and expenses only expense categories.
    """

    def __init__(self, keywords: Optional[Mapping[str, List[str]]] = None):
        self.keywords = _freeze(keywords) if keywords is not None else load_keyword_table()
        self._patterns = {
            category: [(kw, self._compile(kw)) for kw in kws]
            for category, kws in self.keywords.items()
        }

    @staticmethod
    def _compile(keyword: str):
        """Whole-word match so 'pen' does not hit 'open'."""
        return re.compile(r'(?<!\w)' + re.escape(keyword) + r'(?!\w)')

    def classify(self, transaction: Dict) -> Dict:
        """
        Classify a transaction by keywords

        Args:
            transaction: Dict with payee, description, amount and type

        Returns:
            {'category', 'confidence', 'method', 'matched_keywords'}; confidence 0
            when nothing matched
        """
        payee = (transaction.get('payee') or '').lower()
        description = (transaction.get('description') or '').lower()
        txn_type = transaction.get('type')

        best = {'category': cat.UNCATEGORIZED, 'confidence': 0.0,
                'method': 'keyword_matching', 'matched_keywords': []}

        hit = self._first_hit(payee, txn_type)
        if hit:
            best = {'category': hit[0], 'confidence': PAYEE_KEYWORD_CONFIDENCE,
                    'method': 'payee_keyword_match', 'matched_keywords': [hit[1]]}

        if best['confidence'] < KEYWORD_PAYEE_PRECEDENCE:
            hit = self._first_hit(description, txn_type)
            if hit:
                best = {'category': hit[0], 'confidence': DESCRIPTION_KEYWORD_CONFIDENCE,
                        'method': 'description_keyword_match', 'matched_keywords': [hit[1]]}

        if best['confidence'] < HEURISTIC_THRESHOLD:
            heuristic = self._amount_heuristic(payee, description, transaction.get('amount'))
            if heuristic:
                best = heuristic

        return best

    def _first_hit(self, text: str, txn_type: Optional[str]) -> Optional[Tuple[str, str]]:
        """(category, keyword) of the first matching keyword in table order."""
        if not text:
            return None
        for category, patterns in self._patterns.items():
            if not self._direction_allows(category, txn_type):
                continue
            for keyword, pattern in patterns:
                if pattern.search(text):
                    return category, keyword
        return None

    def _direction_allows(self, category: str, txn_type: Optional[str]) -> bool:
        if txn_type == 'income':
            return category in cat.INCOME_CATEGORIES
        if txn_type == 'expense':
            return category not in cat.INCOME_CATEGORIES
        return True

    def _amount_heuristic(self, payee: str, description: str, amount) -> Optional[Dict]:
        value = _amount_value(amount)
        if value < 10 and ('coffee' in payee or 'starbucks' in payee):
            return {'category': cat.MEALS_ENTERTAINMENT, 'confidence': HEURISTIC_CONFIDENCE,
                    'method': 'amount_heuristic', 'matched_keywords': []}
        if value > 1000 and 'equipment' in description:
            return {'category': cat.OTHER_EXPENSES, 'confidence': HEURISTIC_CONFIDENCE,
                    'method': 'amount_heuristic', 'matched_keywords': []}
        return None
