"""
Fallback Line Scanner - Whole-document pass with looser line patterns

Used when section parsing finds suspiciously few transactions (headers lost
or mangled by text extraction). Candidates are merged into the primary result
only when no record shares their (date, amount, description).
"""

import logging
import re
from typing import Dict, Iterable, List, Optional

from ..config import ELECTRONIC_LOOKAHEAD
from .line_parser import (AMOUNT, DATE, DATE_LINE_RE, LineParser, card_merchant,
                          electronic_company, is_skippable, split_fused_item)
from .utils import build_transaction, transaction_key

logger = logging.getLogger(__name__)

SECTION_CODE = 'fallback'

CARD_RE = re.compile(
    r'^(' + DATE + r')\s*((?:Recurring\s+)?Card\s*Purchase.*?)\s*\$?(' + AMOUNT + r')\s*$',
    re.IGNORECASE)
CO_NAME_RE = re.compile(r'^(' + DATE + r')\s*.*?Orig\s*CO\s*Name:\s*(.+?)(?=\s*Orig\b|$)',
                        re.IGNORECASE)
DATED_CHECK_RE = re.compile(
    r'^(' + DATE + r')\s*.*?\bCHECK\s*#?\s*(\d+)\b.*?\s\$?(' + AMOUNT + r')\s*$', re.IGNORECASE)
DEPOSIT_RE = re.compile(
    r'^(' + DATE + r')\s*(.*?\b(?:deposit|credit|refund|transfer\s+from)\b.*?)\s*(\$?)('
    + AMOUNT + r')\s*$', re.IGNORECASE)
ENDING_AMOUNT_RE = re.compile(r'\$?(' + AMOUNT + r')\s*$')
SAME_LINE_AMOUNT_RE = re.compile(r'\$?(' + AMOUNT + r')')


class FallbackLineScanner:
    """
    Recover transactions line by line across the whole statement
    """

    def __init__(self, line_parser: Optional[LineParser] = None):
        self.line_parser = line_parser or LineParser()

    def scan(self, text: str, year: int) -> List[Dict]:
        """
        Scan every line of the document

        Args:
            text: Full statement text
            year: Statement year

        Returns:
            Candidate transactions tagged with the 'fallback' provenance
        """
        lines = [l.strip() for l in (text or '').splitlines()]
        candidates = []
        for i, line in enumerate(lines):
            if is_skippable(line):
                continue
            txn = self._scan_line(lines, i, year)
            if txn:
                candidates.append(txn)
        logger.debug("Fallback scan found %d candidates", len(candidates))
        return candidates

    def merge(self, existing: List[Dict], candidates: Iterable[Dict]) -> List[Dict]:
        """
        Add candidates whose (date, amount, description) is not already present

        Returns:
            The candidates that were added (existing is extended in place)
        """
        seen = {transaction_key(t) for t in existing}
        added = []
        for txn in candidates:
            key = transaction_key(txn)
            if key in seen:
                continue
            seen.add(key)
            existing.append(txn)
            added.append(txn)
        return added

    def _scan_line(self, lines: List[str], i: int, year: int) -> Optional[Dict]:
        line = lines[i]

        match = CO_NAME_RE.match(line)
        if match:
            return self._electronic(lines, i, match, year)

        match = CARD_RE.match(line)
        if match:
            description = match.group(2)
            return build_transaction(match.group(1), year, description, match.group(3),
                                     SECTION_CODE, payee=card_merchant(description),
                                     txn_type='expense')

        txn = self.line_parser.parse_check_line(line, year, section_code=SECTION_CODE)
        if txn:
            return txn

        match = DATED_CHECK_RE.match(line)
        if match:
            check_number = match.group(2)
            return build_transaction(match.group(1), year, 'CHECK #%s' % check_number,
                                     match.group(3), SECTION_CODE, payee='',
                                     txn_type='expense', check_number=check_number)

        match = DEPOSIT_RE.match(line)
        if match:
            date_str, description, dollar, amount = match.groups()
            description, amount = split_fused_item(description.strip(), amount, bool(dollar))
            return build_transaction(date_str, year, description, amount, SECTION_CODE,
                                     txn_type='income')

        return None

    def _electronic(self, lines: List[str], i: int, match, year: int) -> Optional[Dict]:
        company = electronic_company(match.group(2))
        amounts = SAME_LINE_AMOUNT_RE.findall(lines[i])
        amount = amounts[-1] if amounts else None

        if amount is None:
            for nxt in lines[i + 1:i + 1 + ELECTRONIC_LOOKAHEAD]:
                if DATE_LINE_RE.match(nxt) or re.match(r'^Total\b', nxt, re.IGNORECASE):
                    break
                if 'co name' in nxt.lower():
                    continue
                found = ENDING_AMOUNT_RE.search(nxt)
                if found:
                    amount = found.group(1)
                    break

        if amount is None:
            return None
        return build_transaction(match.group(1), year, 'Electronic Payment: %s' % company,
                                 amount, SECTION_CODE, payee=company, txn_type='expense')
