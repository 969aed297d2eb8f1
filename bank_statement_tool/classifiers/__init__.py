"""
Classifiers Package - Transaction classification modules
"""

from .keyword_classifier import KeywordClassifier, load_keyword_table
from .rule_matcher import RuleMatcher
from .history_matcher import HistoryMatcher
from .classification_engine import ClassificationEngine

__all__ = [
    'KeywordClassifier',
    'load_keyword_table',
    'RuleMatcher',
    'HistoryMatcher',
    'ClassificationEngine',
]
