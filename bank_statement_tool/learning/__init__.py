"""
Learning Package - Turn reviewed transactions into classification rules

- trainer.py: promote repeated payee -> category corrections into rules
- history_loader.py: import reviewed history from ledger exports
"""

from .trainer import RuleTrainer
from .history_loader import load_reviewed_history

__all__ = ['RuleTrainer', 'load_reviewed_history']
