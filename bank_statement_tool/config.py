"""
Bank Statement Tool - Configuration
Every value can be overridden through the environment (BST_* variables).
"""

import os


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value else default


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    return float(value) if value else default


# Base paths
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.environ.get('BST_DATA_DIR', os.path.join(BASE_DIR, 'data'))
KEYWORDS_FILE = os.path.join(DATA_DIR, 'keywords.json')

# Date formats tried on statement period strings
DATE_FORMATS_TO_TRY = [
    "%m/%d/%Y", "%m-%d-%Y", "%Y-%m-%d", "%m/%d/%y",
    "%Y/%m/%d", "%b %d, %Y", "%B %d, %Y", "%d %b %Y", "%d %B %Y"
]

# Extraction limits
MAX_TRANSACTION_AMOUNT = 1000000
PAYEE_MAX_LENGTH = 50
MERCHANT_MAX_WORDS = 3
ELECTRONIC_LOOKAHEAD = 10
HEADER_SCAN_LINES = 20

# Section parsing below this count triggers the whole-document fallback scan.
# Tuned on Chase business checking statements only.
LOW_YIELD_THRESHOLD = _env_int('BST_LOW_YIELD_THRESHOLD', 25)

# Text whose share of control/replacement characters exceeds this is unreadable
GARBAGE_RATIO_LIMIT = 0.30

# Classification confidence
# A user rule above this resolves the transaction without history lookups.
USER_RULE_SHORT_CIRCUIT = 0.8
RULE_WEIGHTS = {'payee': 0.4, 'description': 0.3, 'amount': 0.2}
PAYEE_KEYWORD_CONFIDENCE = 0.7
DESCRIPTION_KEYWORD_CONFIDENCE = 0.5
KEYWORD_PAYEE_PRECEDENCE = 0.6
HEURISTIC_THRESHOLD = 0.4
HEURISTIC_CONFIDENCE = 0.4
HISTORY_MAX_CONFIDENCE = 0.8
HISTORY_LIMIT = _env_int('BST_HISTORY_LIMIT', 100)
FALLBACK_CONFIDENCE = 0.1

CONFIDENCE_HIGH = 0.85
CONFIDENCE_MEDIUM = 0.60
CONFIDENCE_LOW = 0.40

# Trainer
MIN_TRAINING_GROUP = 2
NEW_RULE_CONFIDENCE = 0.7
RULE_CONFIDENCE_STEP = 0.1
RULE_CONFIDENCE_CAP = 0.9

# Classification worker threads (1 = sequential)
CLASSIFY_WORKERS = _env_int('BST_CLASSIFY_WORKERS', 1)

# Job status cache
JOB_STATUS_TTL_SECONDS = _env_float('BST_JOB_STATUS_TTL', 3600.0)
JOB_STATUS_MAX_ENTRIES = _env_int('BST_JOB_STATUS_MAX', 1000)

# MongoDB
MONGODB_URI = os.environ.get('MONGODB_URI', 'mongodb://localhost:27017/')
MONGODB_DATABASE = os.environ.get('MONGODB_DATABASE', 'bank_statement_tool')
MONGODB_TIMEOUT_MS = _env_int('BST_MONGODB_TIMEOUT_MS', 2000)
RULES_COLLECTION = 'classification_rules'
TRANSACTIONS_COLLECTION = 'transactions'

# Logging
LOG_LEVEL = os.environ.get('BST_LOG_LEVEL', 'INFO')
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
