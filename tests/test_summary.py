from decimal import Decimal

from bank_statement_tool.processors.summary import SummaryGenerator, format_summary


def _txn(amount, txn_type, category='Uncategorized', section_code='deposits',
         section='Deposits and Additions', needs_review=False):
    return {'amount': Decimal(amount), 'type': txn_type, 'category': category,
            'section_code': section_code, 'section': section, 'needs_review': needs_review}


def test_empty_list():
    summary = SummaryGenerator().generate([])

    assert summary['total_transactions'] == 0
    assert summary['total_income'] == Decimal('0')
    assert summary['total_expenses'] == Decimal('0')
    assert summary['net_income'] == Decimal('0')
    assert summary['category_summary'] == {}
    assert summary['section_summary'] == {}
    assert summary['needs_review'] == 0


def test_totals_and_breakdowns():
    txns = [
        _txn('1000.00', 'income', 'Gross Receipts or Sales'),
        _txn('40.10', 'expense', 'Car and Truck Expenses', 'card', 'ATM & Debit Card Withdrawals'),
        _txn('9.90', 'expense', 'Car and Truck Expenses', 'card', 'ATM & Debit Card Withdrawals',
             needs_review=True),
    ]
    summary = SummaryGenerator().generate(txns)

    assert summary['total_income'] == Decimal('1000.00')
    assert summary['total_expenses'] == Decimal('50.00')
    assert summary['net_income'] == Decimal('950.00')
    assert summary['category_summary']['Car and Truck Expenses'] == {
        'total': Decimal('50.00'), 'count': 2, 'type': 'expense'}
    assert summary['section_summary']['card'] == {
        'name': 'ATM & Debit Card Withdrawals', 'total': Decimal('50.00'), 'count': 2}
    assert summary['needs_review'] == 1


def test_missing_section_is_uncategorized():
    summary = SummaryGenerator().generate([{'amount': Decimal('5.00'), 'type': 'expense'}])

    assert summary['section_summary'] == {
        'uncategorized': {'name': 'Uncategorized Section', 'total': Decimal('5.00'), 'count': 1}}
    assert 'Uncategorized' in summary['category_summary']


def test_invariants_hold_for_many_entries():
    txns = []
    for i in range(150):
        if i % 3 == 0:
            txns.append(_txn('%d.25' % i, 'income', 'Gross Receipts or Sales'))
        else:
            txns.append(_txn('%d.10' % i, 'expense', 'Supplies (Not Inventory)', 'checks', 'Checks Paid'))
    summary = SummaryGenerator().generate(txns)

    assert summary['total_transactions'] == 150
    assert summary['net_income'] == summary['total_income'] - summary['total_expenses']
    assert sum(c['count'] for c in summary['category_summary'].values()) == 150
    assert sum(s['count'] for s in summary['section_summary'].values()) == 150
    assert sum(c['total'] for c in summary['category_summary'].values()) == \
        summary['total_income'] + summary['total_expenses']
    assert summary['total_income'] == sum(t['amount'] for t in txns if t['type'] == 'income')


def test_format_summary_rounds_to_float():
    summary = SummaryGenerator().generate([_txn('1234.50', 'income')])
    formatted = format_summary(summary)

    assert formatted['total_income'] == 1234.5
    assert isinstance(formatted['net_income'], float)
    assert isinstance(formatted['category_summary']['Uncategorized']['total'], float)
    assert formatted['section_summary']['deposits']['count'] == 1
