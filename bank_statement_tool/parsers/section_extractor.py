"""
Section Extractor - Locate the transaction sections of a statement

Each section starts at an upper-case header line and ends at its total line.
When the total line is missing the section runs to the next known header or
to the end of the text.
"""

import logging
import re
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

SECTIONS = (
    {
        'code': 'deposits',
        'header': 'DEPOSITS AND ADDITIONS',
        'totals': ('Total Deposits and Additions', 'TOTAL DEPOSITS'),
    },
    {
        'code': 'checks',
        'header': 'CHECKS PAID',
        'totals': ('Total Checks Paid',),
    },
    {
        'code': 'card',
        'header': 'ATM & DEBIT CARD WITHDRAWALS',
        'totals': ('Total ATM & Debit Card Withdrawals',),
    },
    {
        'code': 'electronic',
        'header': 'ELECTRONIC WITHDRAWALS',
        'totals': ('Total Electronic Withdrawals',),
    },
)

SECTION_CODES = tuple(s['code'] for s in SECTIONS)


class SectionExtractor:
    """
    Slice statement text into its deposit, check, card and electronic sections
    """

    def __init__(self, sections=SECTIONS):
        self.sections = sections
        self._headers = {
            s['code']: re.compile(r'^[ \t]*' + re.escape(s['header']), re.MULTILINE)
            for s in sections
        }
        self._totals = {
            s['code']: [re.compile(r'^[ \t]*' + re.escape(t), re.MULTILINE | re.IGNORECASE)
                        for t in s['totals']]
            for s in sections
        }

    def extract(self, text: str) -> Dict[str, Optional[str]]:
        """
        Extract every known section

        Args:
            text: Full statement text

        Returns:
            {section_code: section text or None when the header is absent}
        """
        return {s['code']: self._slice(text or '', s['code']) for s in self.sections}

    def find_sections(self, text: str) -> Dict:
        """Extract sections and report which headers were found."""
        sections = self.extract(text)
        found = {code: body is not None for code, body in sections.items()}
        for code, present in found.items():
            if present:
                logger.debug("Section %s: %d chars", code, len(sections[code]))
            else:
                logger.debug("Section %s not found", code)
        return {'sections': sections, 'found': found}

    def _slice(self, text: str, code: str) -> Optional[str]:
        """Text between the first header line and the first total after it."""
        header = self._headers[code].search(text)
        if not header:
            return None

        line_end = text.find('\n', header.end())
        start = len(text) if line_end == -1 else line_end + 1

        candidates: List[int] = []
        for pattern in self._totals[code]:
            total = pattern.search(text, start)
            if total:
                candidates.append(total.start())
        for other, pattern in self._headers.items():
            if other == code:
                continue
            nxt = pattern.search(text, start)
            if nxt:
                candidates.append(nxt.start())

        end = min(candidates) if candidates else len(text)
        return text[start:end]
