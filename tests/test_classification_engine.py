import pytest

from conftest import make_transaction

from bank_statement_tool.classifiers.categories import COMMON_SUGGESTIONS
from bank_statement_tool.classifiers.classification_engine import ClassificationEngine
from bank_statement_tool.classifiers.rule_matcher import RuleMatcher
from bank_statement_tool.exceptions import StoreError
from bank_statement_tool.storage.base import RuleStore, TransactionHistory

USER = 'user-1'


class UnreachableHistory(TransactionHistory):
    def get_transactions(self, user_id, limit=100):
        raise AssertionError("history must not be consulted")

    def add_transactions(self, user_id, transactions):
        raise AssertionError("history must not be written")


class BrokenRuleStore(RuleStore):
    def get_rules(self, user_id):
        raise StoreError("connection refused")

    def create_rule(self, user_id, rule):
        raise StoreError("connection refused")

    def update_rule(self, rule_id, user_id, updates):
        raise StoreError("connection refused")


class ExplodingRuleMatcher(RuleMatcher):
    def match(self, transaction, rules):
        if transaction['payee'] == 'Acme Corp':
            raise TypeError("unsupported operand")
        return super().match(transaction, rules)


@pytest.fixture
def engine(store, keyword_classifier):
    return ClassificationEngine(store, store, keyword_classifier=keyword_classifier)


def _shell_rule(store, confidence):
    return store.create_rule(USER, {
        'rule_name': 'Fuel',
        'payee_contains': ['Shell Gas'],
        'target_category': 'Car and Truck Expenses',
        'target_type': 'expense',
        'confidence': confidence,
        'success_rate': 1.0,
    })


def test_confident_user_rule_short_circuits(store, keyword_classifier):
    rule = _shell_rule(store, 0.9)
    engine = ClassificationEngine(store, UnreachableHistory(), keyword_classifier=keyword_classifier)

    result = engine.classify(make_transaction('Shell Gas 123'), USER)

    assert result['category'] == 'Car and Truck Expenses'
    assert result['confidence'] == 0.9
    assert result['method'] == 'user_rule'
    assert result['rule_id'] == rule['id']
    assert result['suggestions'] == []


def test_weaker_rule_wins_ties_and_keyword_becomes_suggestion(store, engine):
    _shell_rule(store, 0.7)

    result = engine.classify(make_transaction('Shell Gas'), USER)

    assert result['method'] == 'user_rule'
    assert result['confidence'] == 0.7
    assert result['suggestions'][0]['method'] == 'payee_keyword_match'
    assert result['suggestions'][0]['category'] == 'Car and Truck Expenses'


def test_inactive_rules_are_ignored(store, engine):
    rule = _shell_rule(store, 0.9)
    store.update_rule(rule['id'], USER, {'is_active': False})

    result = engine.classify(make_transaction('Shell Gas'), USER)

    assert result['method'] == 'payee_keyword_match'


def test_payee_keyword(engine):
    result = engine.classify(make_transaction('Staples'), USER)

    assert result['category'] == 'Office Expenses'
    assert result['confidence'] == 0.7
    assert result['method'] == 'payee_keyword_match'
    assert result['matched_keywords'] == ['staples']


def test_description_keyword_for_income(engine):
    txn = make_transaction('', description='Deposit 1', txn_type='income')
    result = engine.classify(txn, USER)

    assert result['category'] == 'Gross Receipts or Sales'
    assert result['confidence'] == 0.5
    assert result['method'] == 'description_keyword_match'


def test_keywords_match_whole_words_only(keyword_classifier):
    result = keyword_classifier.classify(make_transaction('Openview Labs'))
    assert result['confidence'] == 0.0


def test_amount_heuristic(keyword_classifier):
    result = keyword_classifier.classify(
        make_transaction('Corner Coffeehouse', amount='4.50', description='Corner Coffeehouse'))
    assert result['method'] == 'amount_heuristic'
    assert result['category'] == 'Meals and Entertainment'
    assert result['confidence'] == 0.4


def test_history_majority(store, engine):
    store.add_transactions(USER, [
        make_transaction('Zeta Widgets Co', 'Supplies (Not Inventory)', reviewed=True),
        make_transaction('Zeta Widgets Co', 'Supplies (Not Inventory)', reviewed=True),
        make_transaction('Zeta Widgets Co', 'Office Expenses', reviewed=True),
    ])

    result = engine.classify(make_transaction('Zeta Widgets Co'), USER)

    assert result['category'] == 'Supplies (Not Inventory)'
    assert result['method'] == 'historical_pattern'
    assert result['confidence'] == pytest.approx(0.6667)
    assert result['historical_count'] == 2
    assert result['total_similar'] == 3


def test_history_confidence_is_capped(store, engine):
    store.add_transactions(USER, [
        make_transaction('Zeta Widgets Co', 'Supplies (Not Inventory)', reviewed=True)
        for _ in range(3)
    ])

    result = engine.classify(make_transaction('Zeta Widgets Co'), USER)

    assert result['confidence'] == 0.8


def test_unreviewed_history_is_ignored(store, engine):
    store.add_transactions(USER, [make_transaction('Zeta Widgets Co', 'Supplies (Not Inventory)')])

    result = engine.classify(make_transaction('Zeta Widgets Co'), USER)

    assert result['category'] == 'Uncategorized'
    assert result['method'] == 'no_valid_classification'


def test_nothing_matches(engine):
    result = engine.classify(make_transaction('Zzyzx'), USER)

    assert result['category'] == 'Uncategorized'
    assert result['confidence'] == 0.1
    assert [s['category'] for s in result['suggestions']] == list(COMMON_SUGGESTIONS)


def test_empty_payee_and_description(engine):
    result = engine.classify(make_transaction('', description=''), USER)

    assert result['category'] == 'Uncategorized'
    assert result['confidence'] < 0.5
    assert result['suggestions']


def test_store_error_downgrades(keyword_classifier, store):
    engine = ClassificationEngine(BrokenRuleStore(), store, keyword_classifier=keyword_classifier)

    result = engine.classify(make_transaction('Staples'), USER)

    assert result == {'category': 'Uncategorized', 'confidence': 0.1,
                      'method': 'error_fallback', 'suggestions': []}
    assert [r['method'] for r in engine.classify_batch([make_transaction('A'), make_transaction('B')],
                                                        USER)] == ['error_fallback'] * 2


def test_malformed_rule_does_not_stop_the_batch(store, engine):
    store.create_rule(USER, {'rule_name': 'Labor', 'payee_contains': ['acme'],
                             'target_category': 'Contract Labor', 'confidence': None})

    results = engine.classify_batch([make_transaction('Staples'), make_transaction('Acme Corp')], USER)

    assert [r['category'] for r in results] == ['Office Expenses', 'Uncategorized']
    assert results[1]['method'] == 'no_valid_classification'


def test_data_error_downgrades_one_transaction(store, keyword_classifier):
    engine = ClassificationEngine(store, store, keyword_classifier=keyword_classifier,
                                  rule_matcher=ExplodingRuleMatcher())

    results = engine.classify_batch([make_transaction('Staples'), make_transaction('Acme Corp')], USER)

    assert results[0]['category'] == 'Office Expenses'
    assert results[1] == {'category': 'Uncategorized', 'confidence': 0.1,
                          'method': 'error_fallback', 'suggestions': []}


def test_string_amount_with_currency_symbol(engine):
    txn = dict(make_transaction('Corner Coffeehouse'), amount='$5.00')

    result = engine.classify(txn, USER)

    assert result['method'] == 'amount_heuristic'
    assert result['category'] == 'Meals and Entertainment'


@pytest.mark.parametrize("confidence,success_rate,expected", [
    (None, None, 0.0),
    ('high', 1.0, 0.0),
    ('0.9', None, 0.9),
    (0.8, 5, 0.8),
])
def test_rule_confidence_is_coerced(confidence, success_rate, expected):
    rule = {'id': 'r1', 'payee_contains': ['acme'], 'target_category': 'Contract Labor',
            'confidence': confidence, 'success_rate': success_rate}

    result = RuleMatcher().match(make_transaction('ACME Corp'), [rule])

    assert result['confidence'] == expected


def test_batch_keeps_input_order(engine):
    payees = ['Staples', 'Zzyzx', 'Shell', 'Starbucks', 'Verizon', 'Home Depot'] * 3
    txns = [make_transaction(p) for p in payees]

    sequential = engine.classify_batch(txns, USER, max_workers=1)
    parallel = engine.classify_batch(txns, USER, max_workers=4)

    assert parallel == sequential
    assert [r['category'] for r in parallel[:3]] == [
        'Office Expenses', 'Uncategorized', 'Car and Truck Expenses']


def test_classify_transactions_returns_copies(engine):
    txn = make_transaction('Staples')
    [updated] = engine.classify_transactions([txn], USER)

    assert txn['category'] == 'Uncategorized'
    assert updated['category'] == 'Office Expenses'
    assert updated['classification_method'] == 'payee_keyword_match'
    assert updated['needs_review'] is False


def test_rule_keywords_can_match_description():
    rule = {'id': 'r1', 'keywords': ['rent'], 'target_category': 'Rent or Lease (Other Business Property)',
            'confidence': 0.8, 'success_rate': 0.5}
    result = RuleMatcher().match(make_transaction('', description='Monthly rent payment'), [rule])

    assert result['confidence'] == 0.4
    assert result['matched_keywords'] == ['rent']


def test_rule_amount_range_scores_partially():
    rule = {'id': 'r1', 'payee_contains': ['acme'], 'amount_range': {'min': 100, 'max': 200},
            'target_category': 'Contract Labor', 'confidence': 1.0}
    matcher = RuleMatcher()

    inside = matcher.match(make_transaction('ACME Corp', amount='150.00'), [rule])
    outside = matcher.match(make_transaction('ACME Corp', amount='500.00'), [rule])

    assert inside['confidence'] == 1.0
    assert outside['confidence'] == pytest.approx(0.6667)


@pytest.mark.parametrize("confidence,level", [(0.9, 'high'), (0.7, 'medium'), (0.45, 'low'),
                                              (0.1, 'none')])
def test_confidence_levels(confidence, level):
    assert ClassificationEngine.get_confidence_level(confidence) == level


def test_get_summary(engine):
    results = [engine.classify(make_transaction(p), USER) for p in ('Staples', 'Zzyzx')]
    summary = engine.get_summary(results)

    assert summary['total'] == 2
    assert summary['uncategorized'] == 1
    assert summary['by_method'] == {'payee_keyword_match': 1, 'no_valid_classification': 1}
    assert summary['by_confidence']['medium'] == 1
