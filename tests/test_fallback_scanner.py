from decimal import Decimal

from bank_statement_tool.parsers.fallback_scanner import FallbackLineScanner

HEADERLESS = """Some garbled page header
01/05 Deposit 1 $500.00
533 ^ 01/03 01/03 400.00
01/02 Card Purchase 12/29 Chevron 0202648 Plantation FL Card 1819 $38.80
01/11 Orig CO Name:Home Depot Orig ID:1 CO Entry Descr:Payment
1,250.00
01/20 Misc line 5.00
"""


def test_scan_recovers_each_line_family():
    candidates = FallbackLineScanner().scan(HEADERLESS, 2024)

    assert [(t['date'], t['amount']) for t in candidates] == [
        ("2024-01-05", Decimal("500.00")),
        ("2024-01-03", Decimal("400.00")),
        ("2024-01-02", Decimal("38.80")),
        ("2024-01-11", Decimal("1250.00")),
    ]
    assert all(t['section_code'] == 'fallback' for t in candidates)
    assert all(t['section'] == 'Fallback Scan' for t in candidates)
    assert [t['type'] for t in candidates] == ['income', 'expense', 'expense', 'expense']
    assert candidates[2]['payee'] == "Chevron"
    assert candidates[3]['payee'] == "Home Depot"


def test_scan_dated_check_line():
    candidates = FallbackLineScanner().scan("01/07 CHECK # 1045 $75.00\n", 2024)

    assert len(candidates) == 1
    assert candidates[0]['description'] == "CHECK #1045"
    assert candidates[0]['check_number'] == "1045"
    assert candidates[0]['amount'] == Decimal("75.00")


def test_scan_income_keywords():
    text = "01/08 Refund From Vendor $20.00\n01/09 Online Transfer From Savings $300.00\n"
    candidates = FallbackLineScanner().scan(text, 2024)
    assert [t['type'] for t in candidates] == ['income', 'income']


def test_merge_skips_duplicates():
    scanner = FallbackLineScanner()
    existing = scanner.scan("01/05 Deposit 1 $500.00\n", 2024)
    candidates = scanner.scan("01/05 Deposit 1 $500.00\n01/06 Deposit 2 $25.00\n", 2024)

    added = scanner.merge(existing, candidates)

    assert len(added) == 1
    assert added[0]['amount'] == Decimal("25.00")
    assert len(existing) == 2


def test_merge_skips_repeated_candidates():
    scanner = FallbackLineScanner()
    candidates = scanner.scan("01/05 Deposit $500.00\n01/05 Deposit $500.00\n", 2024)
    existing = []
    scanner.merge(existing, candidates)
    assert len(existing) == 1
