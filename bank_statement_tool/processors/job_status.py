"""
Job Status Store - Non-durable progress records for parse/classify jobs

Entries expire after a TTL and the oldest are evicted beyond max_entries.
Jobs in flight when the process exits are lost; callers resubmit them.
"""

import threading
import time
import uuid
from collections import OrderedDict
from typing import Callable, Dict, Optional

from ..config import JOB_STATUS_MAX_ENTRIES, JOB_STATUS_TTL_SECONDS

PENDING = 'pending'
RUNNING = 'running'
COMPLETED = 'completed'
FAILED = 'failed'


class JobStatusStore:
    """
    Thread-safe in-memory job status cache
    """

    def __init__(self, ttl_seconds: float = JOB_STATUS_TTL_SECONDS,
                 max_entries: int = JOB_STATUS_MAX_ENTRIES,
                 clock: Callable[[], float] = time.monotonic):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._jobs: "OrderedDict[str, Dict]" = OrderedDict()
        self._lock = threading.Lock()

    def create(self, job_id: Optional[str] = None, message: str = '') -> str:
        """
        Register a job and return its id

        Raises:
            ValueError: job_id belongs to a job that has not expired
        """
        job_id = job_id or uuid.uuid4().hex
        with self._lock:
            self._evict_expired()
            if job_id in self._jobs:
                raise ValueError("Job %s already exists" % job_id)
            self._jobs[job_id] = {
                'job_id': job_id,
                'status': PENDING,
                'progress': 0,
                'message': message,
                'error': None,
                'updated_at': self._clock(),
            }
            while len(self._jobs) > self.max_entries:
                self._jobs.popitem(last=False)
        return job_id

    def update(self, job_id: str, progress: int, message: str = '') -> Optional[Dict]:
        """
        Record progress; a lower value than already reported is ignored

        Returns:
            Copy of the job record, or None if unknown or expired
        """
        with self._lock:
            job = self._live(job_id)
            if job is None:
                return None
            job['progress'] = max(job['progress'], min(100, max(0, int(progress))))
            if job['status'] == PENDING:
                job['status'] = RUNNING
            if message:
                job['message'] = message
            job['updated_at'] = self._clock()
            return dict(job)

    def complete(self, job_id: str, message: str = 'Completed') -> Optional[Dict]:
        return self._finish(job_id, COMPLETED, message, None)

    def fail(self, job_id: str, error: str) -> Optional[Dict]:
        return self._finish(job_id, FAILED, 'Failed', error)

    def get(self, job_id: str) -> Optional[Dict]:
        with self._lock:
            job = self._live(job_id)
            return dict(job) if job else None

    def __len__(self) -> int:
        with self._lock:
            self._evict_expired()
            return len(self._jobs)

    def _finish(self, job_id: str, status: str, message: str,
                error: Optional[str]) -> Optional[Dict]:
        with self._lock:
            job = self._live(job_id)
            if job is None:
                return None
            job['status'] = status
            if status == COMPLETED:
                job['progress'] = 100
            job['message'] = message
            job['error'] = error
            job['updated_at'] = self._clock()
            return dict(job)

    def _live(self, job_id: str) -> Optional[Dict]:
        """Job record if present and not expired (lock held)."""
        job = self._jobs.get(job_id)
        if job is None:
            return None
        if self._clock() - job['updated_at'] > self.ttl_seconds:
            del self._jobs[job_id]
            return None
        return job

    def _evict_expired(self):
        now = self._clock()
        expired = [k for k, job in self._jobs.items() if now - job['updated_at'] > self.ttl_seconds]
        for key in expired:
            del self._jobs[key]
