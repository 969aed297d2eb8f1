"""Shared fixtures: a small Chase-style statement and an in-memory store."""

from datetime import date
from decimal import Decimal

import pytest

from bank_statement_tool.classifiers.keyword_classifier import DEFAULT_KEYWORDS, KeywordClassifier
from bank_statement_tool.storage import InMemoryStore

SAMPLE_STATEMENT = """JPMorgan Chase Bank, N.A.
ACME CONSTRUCTION LLC
123 Main Street
Miami, FL 33101
Account Number: 000000123456789
January 1, 2024 through January 31, 2024

CHECKING SUMMARY
Beginning Balance $10,000.00
Ending Balance $8,955.45

DEPOSITS AND ADDITIONS
DATE DESCRIPTION AMOUNT
01/05 Deposit 1 $500.00
01/19 Remote Online Deposit 1 1,000.00
Total Deposits and Additions $1,500.00

CHECKS PAID
CHECK NO. DESCRIPTION DATE PAID AMOUNT
533 ^ 01/03 01/03 400.00
Total Checks Paid $400.00

ATM & DEBIT CARD WITHDRAWALS
DATE DESCRIPTION AMOUNT
01/02 Card Purchase 12/29 Chevron 0202648 Plantation FL Card 1819 $38.80
01/08 Card Purchase 01/07 Starbucks Store Miami FL Card 1819 $5.75
Total ATM & Debit Card Withdrawals $44.55

ELECTRONIC WITHDRAWALS
DATE DESCRIPTION AMOUNT
01/11 Orig CO Name:Home Depot Orig ID:1234567890 Desc Date:010 CO Entry Descr:Payment Sec:CCD $1,250.00
01/16 Orig CO Name:Irs Orig ID:3387702000 Desc Date:011524
CO Entry Descr:Usataxpymt Sec:CCD
850.00
Total Electronic Withdrawals $2,100.00
"""

TODAY = date(2024, 3, 1)


@pytest.fixture
def sample_statement():
    return SAMPLE_STATEMENT


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def keyword_classifier():
    # built-in table, independent of any keywords.json in the data dir
    return KeywordClassifier(DEFAULT_KEYWORDS)


def make_transaction(payee, category='Uncategorized', reviewed=False, amount='50.00',
                     txn_type='expense', description=None, date_str='2024-01-10'):
    return {
        'date': date_str,
        'amount': Decimal(amount),
        'description': description if description is not None else payee,
        'payee': payee,
        'type': txn_type,
        'category': category,
        'is_manually_reviewed': reviewed,
    }
