from decimal import Decimal

import pandas as pd
import pytest

from bank_statement_tool.learning.history_loader import load_reviewed_history

LEDGER_CSV = """Date,Description,Payee,Amount,Category
2024-01-02,Card Purchase Shell Gas 123,Shell Gas,-45.00,Car and Truck Expenses
2024-01-09,DEBIT ACME SUPPLY - 1234,,-30.00,Supplies (Not Inventory)
2024-01-10,Client payment,ACME Corp,"1,500.00",Gross Receipts or Sales
2024-01-11,Mystery,,10.00,
"""


def test_load_csv(tmp_path):
    path = tmp_path / "ledger.csv"
    path.write_text(LEDGER_CSV)

    records = load_reviewed_history(str(path))

    assert len(records) == 3
    assert all(r['is_manually_reviewed'] for r in records)
    assert [r['date'] for r in records] == ['2024-01-02', '2024-01-09', '2024-01-10']
    assert [r['payee'] for r in records] == ['Shell Gas', 'ACME SUPPLY', 'ACME Corp']
    assert [r['amount'] for r in records] == [Decimal('45.00'), Decimal('30.00'), Decimal('1500.00')]
    assert [r['type'] for r in records] == ['expense', 'expense', 'income']
    assert records[0]['category'] == 'Car and Truck Expenses'


def test_column_aliases_and_type_column(tmp_path):
    path = tmp_path / "ledger.csv"
    path.write_text("Transaction Date,Memo,Vendor,Debit,Account,Type\n"
                    "01/05/2024,Office run,Staples,25.10,Office Expenses,expense\n")

    [record] = load_reviewed_history(str(path))

    assert record['date'] == '2024-01-05'
    assert record['payee'] == 'Staples'
    assert record['type'] == 'expense'
    assert record['amount'] == Decimal('25.10')


def test_load_excel(tmp_path):
    path = tmp_path / "ledger.xlsx"
    pd.DataFrame([
        {'Date': '2024-02-01', 'Payee': 'Shell Gas', 'Amount': -40.0, 'Category': 'Car and Truck Expenses'},
        {'Date': '2024-02-08', 'Payee': 'Shell Gas', 'Amount': -42.5, 'Category': 'Car and Truck Expenses'},
    ]).to_excel(path, index=False)

    records = load_reviewed_history(str(path))

    assert [r['payee'] for r in records] == ['Shell Gas', 'Shell Gas']
    assert records[1]['amount'] == Decimal('42.50')
    assert records[0]['description'] == 'Shell Gas'


def test_missing_category_column(tmp_path):
    path = tmp_path / "ledger.csv"
    path.write_text("Date,Description,Amount\n2024-01-02,Shell,-5.00\n")

    with pytest.raises(ValueError):
        load_reviewed_history(str(path))


def test_type_follows_category_when_no_type_column(tmp_path):
    path = tmp_path / "ledger.csv"
    path.write_text("Date,Payee,Amount,Category\n"
                    "2024-01-02,Shell Gas,45.00,Car and Truck Expenses\n"
                    "2024-01-09,Shell Gas,40.00,Car and Truck Expenses\n"
                    "2024-01-10,ACME Corp,-1500.00,Gross Receipts or Sales\n")

    records = load_reviewed_history(str(path))

    assert [r['type'] for r in records] == ['expense', 'expense', 'income']
    assert records[2]['amount'] == Decimal('1500.00')
