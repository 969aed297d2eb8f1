"""
MongoDB rule store and transaction history (pymongo)

Collections: classification_rules, transactions. Every pymongo failure is
raised as StoreError so the classifier can downgrade it per transaction.
"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from bson.decimal128 import Decimal128
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.errors import PyMongoError

from ..config import (MONGODB_DATABASE, MONGODB_TIMEOUT_MS, MONGODB_URI,
                      RULES_COLLECTION, TRANSACTIONS_COLLECTION)
from .base import RuleStore, StoreError, TransactionHistory, _now, new_rule_document

logger = logging.getLogger(__name__)


def _to_document(record: Dict) -> Dict:
    """Decimals become Decimal128 so amounts keep their cents exactly."""
    doc = {}
    for key, value in record.items():
        if isinstance(value, Decimal):
            doc[key] = Decimal128(value)
        elif isinstance(value, dict):
            doc[key] = _to_document(value)
        else:
            doc[key] = value
    return doc


def _from_document(doc: Dict) -> Dict:
    record = {}
    for key, value in doc.items():
        if key == '_id':
            continue
        if isinstance(value, Decimal128):
            record[key] = value.to_decimal()
        elif isinstance(value, dict):
            record[key] = _from_document(value)
        else:
            record[key] = value
    return record


class MongoStore(RuleStore, TransactionHistory):
    """
    Rule store and transaction history backed by MongoDB
    """

    def __init__(self, uri: str = MONGODB_URI, database: str = MONGODB_DATABASE,
                 client: Optional[MongoClient] = None,
                 timeout_ms: int = MONGODB_TIMEOUT_MS):
        self.uri = uri
        self.database_name = database
        self.timeout_ms = timeout_ms
        self._client = client
        self._db = None

    @property
    def db(self):
        """Database handle, connecting lazily on first use."""
        if self._db is not None:
            return self._db
        try:
            if self._client is None:
                self._client = MongoClient(
                    self.uri,
                    serverSelectionTimeoutMS=self.timeout_ms,
                    connectTimeoutMS=self.timeout_ms,
                    socketTimeoutMS=self.timeout_ms,
                )
                self._client.admin.command('ping')
                logger.info("Connected to MongoDB database %s", self.database_name)
            self._db = self._client[self.database_name]
        except PyMongoError as e:
            raise StoreError("MongoDB connection failed: %s" % e) from e
        return self._db

    @property
    def rules(self):
        return self.db[RULES_COLLECTION]

    @property
    def transactions(self):
        return self.db[TRANSACTIONS_COLLECTION]

    def ensure_indexes(self):
        try:
            self.rules.create_index([('user_id', ASCENDING), ('id', ASCENDING)], unique=True)
            self.transactions.create_index([('user_id', ASCENDING), ('date', DESCENDING)])
        except PyMongoError as e:
            raise StoreError("Could not create indexes: %s" % e) from e

    # =========================================================================
    # RULES
    # =========================================================================

    def get_rules(self, user_id: str) -> List[Dict]:
        try:
            cursor = self.rules.find({'user_id': user_id}).sort('created_at', ASCENDING)
            return [_from_document(doc) for doc in cursor]
        except PyMongoError as e:
            raise StoreError("Could not read rules for %s: %s" % (user_id, e)) from e

    def create_rule(self, user_id: str, rule: Dict) -> Dict:
        doc = new_rule_document(user_id, rule)
        try:
            self.rules.insert_one(_to_document(doc))
        except PyMongoError as e:
            raise StoreError("Could not create rule for %s: %s" % (user_id, e)) from e
        return doc

    def update_rule(self, rule_id: str, user_id: str, updates: Dict) -> Dict:
        changes = dict(updates, updated_at=_now())
        try:
            doc = self.rules.find_one_and_update(
                {'id': rule_id, 'user_id': user_id},
                {'$set': _to_document(changes)},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise StoreError("Could not update rule %s: %s" % (rule_id, e)) from e
        if doc is None:
            raise StoreError("Rule %s not found for user %s" % (rule_id, user_id))
        return _from_document(doc)

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def get_transactions(self, user_id: str, limit: int = 100) -> List[Dict]:
        try:
            cursor = (self.transactions.find({'user_id': user_id})
                      .sort('date', DESCENDING).limit(limit))
            return [_from_document(doc) for doc in cursor]
        except PyMongoError as e:
            raise StoreError("Could not read transactions for %s: %s" % (user_id, e)) from e

    def add_transactions(self, user_id: str, transactions: Iterable[Dict]) -> int:
        docs = [_to_document(dict(t, user_id=user_id)) for t in transactions]
        if not docs:
            return 0
        try:
            result = self.transactions.insert_many(docs)
        except PyMongoError as e:
            raise StoreError("Could not store transactions for %s: %s" % (user_id, e)) from e
        return len(result.inserted_ids)
