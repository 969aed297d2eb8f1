from decimal import Decimal

import pytest

from bank_statement_tool.parsers.statement_parser import StatementParser, parse_statement


@pytest.fixture
def parser():
    return StatementParser()


def test_parse_sample_statement(parser, sample_statement, today):
    result = parser.parse(sample_statement, today=today)

    assert result['success'] is True
    txns = result['transactions']
    assert len(txns) == 7
    assert [t['date'] for t in txns] == sorted(t['date'] for t in txns)
    assert result['account_info']['statement_year'] == 2024

    deposits = [t for t in txns if t['section_code'] == 'deposits']
    assert len(deposits) == 2
    assert sum(t['amount'] for t in deposits) == Decimal("1500.00")

    summary = result['summary']
    assert summary['total_transactions'] == 7
    assert summary['total_income'] == Decimal("1500.00")
    assert summary['total_expenses'] == Decimal("2544.55")
    assert summary['net_income'] == Decimal("-1044.55")


def test_debug_block(parser, sample_statement, today):
    debug = parser.parse(sample_statement, today=today)['debug']

    assert debug['sections_found'] == {'deposits': True, 'checks': True, 'card': True,
                                       'electronic': True}
    assert debug['section_counts'] == {'deposits': 2, 'checks': 1, 'card': 2, 'electronic': 2}
    assert debug['statement_year'] == 2024
    # low yield triggers the scan, but every candidate is already known
    assert debug['fallback_used'] is True
    assert debug['fallback_added'] == 0
    assert debug['extraction_log'][-1] == 'Total transactions extracted: 7'


def test_fallback_disabled_by_threshold(sample_statement, today):
    result = StatementParser(low_yield_threshold=0).parse(sample_statement, today=today)
    assert result['debug']['fallback_used'] is False
    assert len(result['transactions']) == 7


def test_parse_is_idempotent(parser, sample_statement, today):
    assert parser.parse(sample_statement, today=today) == parser.parse(sample_statement, today=today)


def test_bytes_input(parser, sample_statement, today):
    result = parser.parse(sample_statement.encode('utf-8'), today=today)
    assert result['success'] is True
    assert len(result['transactions']) == 7


def test_out_of_range_amounts_are_dropped(parser, today):
    text = ("DEPOSITS AND ADDITIONS\n"
            "01/05 Deposit $0.00\n"
            "01/06 Deposit $1,000,001.00\n"
            "01/07 Deposit $25.00\n"
            "Total Deposits and Additions $25.00\n")
    txns = parser.parse(text, today=today)['transactions']
    assert [t['amount'] for t in txns] == [Decimal("25.00")]


def test_headerless_text_uses_fallback(parser, today):
    text = "Statement Period: 01/01/2023 - 01/31/2023\n01/05 Deposit 1 $500.00\n"
    result = parser.parse(text, today=today)

    assert result['success'] is True
    assert len(result['transactions']) == 1
    txn = result['transactions'][0]
    assert txn['date'] == "2023-01-05"
    assert txn['section_code'] == 'fallback'
    assert result['debug']['fallback_added'] == 1


def test_no_sections_is_not_an_error(parser, today):
    result = parser.parse("Nothing here\njust words\n", today=today)

    assert result['success'] is True
    assert result['transactions'] == []
    assert result['summary']['total_transactions'] == 0
    assert not any(result['debug']['sections_found'].values())


@pytest.mark.parametrize("raw", [None, "", "   \n  ", 12345, "\ufffd" * 50 + "abc"])
def test_unreadable_input(parser, raw):
    result = parser.parse(raw)

    assert result['success'] is False
    assert result['transactions'] == []
    assert isinstance(result['error'], str) and result['error']


def test_parse_statement_helper(sample_statement):
    result = parse_statement(sample_statement)
    assert result['success'] is True
    assert len(result['transactions']) == 7
