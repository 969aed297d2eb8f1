"""
Processors Package - Summaries and job tracking

StatementProcessor lives in processors.statement_processor and is imported
from there; the parsers depend on this package for SummaryGenerator.
"""

from .summary import SummaryGenerator, format_summary
from .job_status import JobStatusStore

__all__ = ['SummaryGenerator', 'format_summary', 'JobStatusStore']
