"""
Statement Processor - Parse, classify and summarize a statement end-to-end

Progress is reported to a JobStatusStore so a caller on another thread can
poll it by job id.
"""

import logging
from typing import Dict, Optional

from ..classifiers.classification_engine import ClassificationEngine
from ..parsers.statement_parser import StatementParser
from .job_status import JobStatusStore
from .summary import SummaryGenerator

logger = logging.getLogger(__name__)


class StatementProcessor:
    """
    Run the full pipeline for one statement per call
    """

    def __init__(self, engine: ClassificationEngine,
                 parser: Optional[StatementParser] = None,
                 status_store: Optional[JobStatusStore] = None,
                 summary_generator: Optional[SummaryGenerator] = None,
                 max_workers: Optional[int] = None):
        self.engine = engine
        self.parser = parser or StatementParser()
        self.status_store = status_store or JobStatusStore()
        self.summary_generator = summary_generator or SummaryGenerator()
        self.max_workers = max_workers

    def process(self, raw_text, user_id: str, job_id: Optional[str] = None) -> Dict:
        """
        Process a bank statement end-to-end

        Args:
            raw_text: Extracted statement text
            user_id: Owner of rules and history used for classification
            job_id: Status record id; one is created when None

        Returns:
            The parse result with classified transactions, a recomputed
            summary, classification_summary and job_id. Failed parses are
            returned unchanged apart from job_id.

        Raises:
            ValueError: job_id is already in use by a live job
        """
        job_id = self.status_store.create(job_id, message='Queued')

        # Step 1: Parse statement text
        self.status_store.update(job_id, 10, 'Parsing statement')
        result = self.parser.parse(raw_text)
        result['job_id'] = job_id
        if not result['success']:
            self.status_store.fail(job_id, result['error'])
            return result

        transactions = result['transactions']
        self.status_store.update(job_id, 40, 'Classifying %d transactions' % len(transactions))

        # Step 2: Classify transactions
        try:
            classified = self.engine.classify_transactions(transactions, user_id,
                                                           max_workers=self.max_workers)
        except Exception as e:
            self.status_store.fail(job_id, str(e))
            raise

        # Step 3: Summarize
        self.status_store.update(job_id, 90, 'Building summary')
        result['transactions'] = classified
        result['summary'] = self.summary_generator.generate(classified)
        result['classification_summary'] = self.engine.get_summary(
            [{'category': t['category'], 'confidence': t['confidence'],
              'method': t['classification_method']} for t in classified])

        self.status_store.complete(job_id, 'Processed %d transactions' % len(classified))
        logger.info("Job %s: processed %d transactions for %s", job_id, len(classified), user_id)
        return result

    def get_status(self, job_id: str) -> Optional[Dict]:
        return self.status_store.get(job_id)
