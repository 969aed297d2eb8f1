"""
Statement Parser - Turn raw statement text into a structured, date-sorted
transaction list with account info, summary and extraction diagnostics.

Pipeline: header -> sections -> line grammars -> fallback scan (low yield only)
-> merge -> date sort -> summary.
"""

import logging
import re
from datetime import date
from typing import Dict, List, Optional

from ..config import GARBAGE_RATIO_LIMIT, LOW_YIELD_THRESHOLD
from ..exceptions import UnreadableStatementError
from ..processors.summary import SummaryGenerator
from .fallback_scanner import FallbackLineScanner
from .header_extractor import HeaderExtractor
from .line_parser import LineParser
from .section_extractor import SECTION_CODES, SectionExtractor

logger = logging.getLogger(__name__)

# Replacement characters and control characters other than line breaks/tabs
GARBAGE_RE = re.compile(r'[\ufffd\x00-\x08\x0b\x0e-\x1f\x7f]')


class StatementParser:
    """
    Parse Chase-style business checking statements

    Holds no per-statement state, so one instance can parse any number of
    statements, including from several threads.
    """

    def __init__(self, low_yield_threshold: Optional[int] = None,
                 section_extractor: Optional[SectionExtractor] = None,
                 line_parser: Optional[LineParser] = None,
                 fallback_scanner: Optional[FallbackLineScanner] = None,
                 header_extractor: Optional[HeaderExtractor] = None,
                 summary_generator: Optional[SummaryGenerator] = None):
        self.low_yield_threshold = (LOW_YIELD_THRESHOLD if low_yield_threshold is None
                                    else low_yield_threshold)
        self.section_extractor = section_extractor or SectionExtractor()
        self.line_parser = line_parser or LineParser()
        self.fallback_scanner = fallback_scanner or FallbackLineScanner(self.line_parser)
        self.header_extractor = header_extractor or HeaderExtractor()
        self.summary_generator = summary_generator or SummaryGenerator()

    def parse(self, raw_text, today: Optional[date] = None) -> Dict:
        """
        Parse statement text

        Args:
            raw_text: Full statement text as extracted from the PDF
            today: Reference date for the current-year fallback

        Returns:
            {'success': True, 'account_info', 'transactions', 'summary', 'debug'}
            or {'success': False, 'error', 'transactions': []}
        """
        try:
            text = self.validate_text(raw_text)
        except UnreadableStatementError as e:
            logger.error("Statement rejected: %s", e)
            return {'success': False, 'error': str(e), 'transactions': []}

        extraction_log: List[str] = []

        account_info = self.header_extractor.extract(text, today=today)
        year = account_info['statement_year']
        extraction_log.append('Using statement year: %d' % year)

        found = self.section_extractor.find_sections(text)
        transactions: List[Dict] = []
        section_counts = {}
        for code in SECTION_CODES:
            parsed = self.line_parser.parse_section(code, found['sections'][code], year)
            section_counts[code] = len(parsed)
            transactions.extend(parsed)
            if found['found'][code]:
                extraction_log.append('Extracted %d %s transactions' % (len(parsed), code))
            else:
                extraction_log.append('Section %s not found' % code)

        fallback_used = len(transactions) < self.low_yield_threshold
        fallback_added = 0
        if fallback_used:
            extraction_log.append('Low transaction count (%d < %d), running line-by-line fallback'
                                  % (len(transactions), self.low_yield_threshold))
            candidates = self.fallback_scanner.scan(text, year)
            fallback_added = len(self.fallback_scanner.merge(transactions, candidates))
            extraction_log.append('Fallback extraction added %d transactions' % fallback_added)
            logger.info("Fallback scan added %d of %d candidates", fallback_added, len(candidates))

        # stable: same-day records keep statement order
        transactions.sort(key=lambda t: t['date'])
        extraction_log.append('Total transactions extracted: %d' % len(transactions))
        logger.info("Parsed %d transactions (%s)", len(transactions),
                    ', '.join('%s=%d' % item for item in section_counts.items()))

        return {
            'success': True,
            'account_info': account_info,
            'transactions': transactions,
            'summary': self.summary_generator.generate(transactions),
            'debug': {
                'text_length': len(text),
                'statement_year': year,
                'sections_found': found['found'],
                'section_counts': section_counts,
                'fallback_used': fallback_used,
                'fallback_added': fallback_added,
                'extraction_log': extraction_log,
            },
        }

    def validate_text(self, raw_text) -> str:
        """
        Reject input that cannot be a statement

        Raises:
            UnreadableStatementError: not text, empty, or mostly garbage characters
        """
        if raw_text is None:
            raise UnreadableStatementError('No statement text provided')
        if isinstance(raw_text, bytes):
            raw_text = raw_text.decode('utf-8', errors='replace')
        if not isinstance(raw_text, str):
            raise UnreadableStatementError(
                'Statement text must be a string, got %s' % type(raw_text).__name__)
        if not raw_text.strip():
            raise UnreadableStatementError('Statement text is empty')

        garbage_ratio = len(GARBAGE_RE.findall(raw_text)) / len(raw_text)
        if garbage_ratio > GARBAGE_RATIO_LIMIT:
            raise UnreadableStatementError(
                'Statement text appears corrupted (%.0f%% unreadable characters)'
                % (garbage_ratio * 100))
        return raw_text


def parse_statement(raw_text, low_yield_threshold: Optional[int] = None) -> Dict:
    """Parse statement text with a default StatementParser."""
    return StatementParser(low_yield_threshold=low_yield_threshold).parse(raw_text)
