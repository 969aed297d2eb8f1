"""
Account/Header Extractor - Account number, statement period, balances and
the account holder's company name/address from the statement header.

Everything here is advisory: a field that cannot be found is left as None
(or '' for company info) and never stops the rest of the parse.
"""

import logging
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional

from ..config import HEADER_SCAN_LINES
from .utils import CENT, infer_year

logger = logging.getLogger(__name__)

ACCOUNT_NUMBER_RE = re.compile(r'Account\s+(?:Number|No\.?)[:\s#]+([*Xx]*\d+)', re.IGNORECASE)
PERIOD_SLASH_RE = re.compile(
    r'Statement\s+Period[:\s]+(\d{1,2}/\d{1,2}/\d{2,4})\s*(?:-|to|through)\s*(\d{1,2}/\d{1,2}/\d{2,4})',
    re.IGNORECASE)
PERIOD_THROUGH_RE = re.compile(
    r'([A-Za-z]+\s+\d{1,2},\s+\d{4})\s*(?:through|-|to)\s*([A-Za-z]+\s+\d{1,2},\s+\d{4})',
    re.IGNORECASE)
BEGINNING_BALANCE_RE = re.compile(r'Beginning\s+Balance[:\s]*\$?\s*([\d,]+\.\d{2})', re.IGNORECASE)
ENDING_BALANCE_RE = re.compile(r'Ending\s+Balance[:\s]*\$?\s*([\d,]+\.\d{2})', re.IGNORECASE)

BOILERPLATE_RE = re.compile(r'chase|statement|account|period|balance|page', re.IGNORECASE)
NUMERIC_LINE_RE = re.compile(r'^[\d\s\-/.,$*#]+$')

BUSINESS_NAME_PATTERNS = [
    re.compile(r'^([A-Z\s]+(?:INC|LLC|CORP|CORPORATION|COMPANY|CO|LTD|LIMITED|CONSTRUCTION|'
               r'ENTERPRISES|SERVICES|GROUP)\.?),?\s*$', re.IGNORECASE),
    re.compile(r'^([A-Z\s]+(?:&|AND)\s+[A-Z\s]+(?:INC|LLC|CORP|CONSTRUCTION)\.?),?\s*$',
               re.IGNORECASE),
    re.compile(r'^([A-Z][A-Za-z\s]+(?:CONSTRUCTION|CONTRACTING|BUILDER|BUILDERS|COMPANY)\.?),?\s*$',
               re.IGNORECASE),
    re.compile(r'^([A-Z][A-Za-z\s]{10,50})\s*$', re.IGNORECASE),
]
STREET_ADDRESS_RE = re.compile(
    r'^\d+\s+[A-Za-z\s]+(?:Street|St|Avenue|Ave|Road|Rd|Drive|Dr|Lane|Ln|Boulevard|Blvd|'
    r'Circle|Cir|Court|Ct|Way|Place|Pl)\.?\s*$', re.IGNORECASE)
CITY_STATE_ZIP_RE = re.compile(r'^[A-Za-z\s]+,\s*[A-Z]{2}\s+\d{5}(?:-\d{4})?\s*$', re.IGNORECASE)


def _to_decimal(text: str) -> Optional[Decimal]:
    try:
        return Decimal(text.replace(',', '')).quantize(CENT)
    except InvalidOperation:
        return None


class HeaderExtractor:
    """
    Best-effort extraction of statement header fields
    """

    def __init__(self, scan_lines: int = HEADER_SCAN_LINES):
        self.scan_lines = scan_lines

    def extract(self, text: str, today: Optional[date] = None) -> Dict:
        """
        Extract account info from statement text

        Args:
            text: Full statement text
            today: Reference date for the current-year fallback

        Returns:
            Dict with account_number, statement_period, beginning_balance,
            ending_balance, company_info and statement_year
        """
        text = text or ''
        info = {
            'account_number': None,
            'statement_period': self.extract_period(text),
            'beginning_balance': None,
            'ending_balance': None,
            'company_info': self.extract_company_info(text),
        }

        account = ACCOUNT_NUMBER_RE.search(text)
        if account:
            info['account_number'] = account.group(1)

        beginning = BEGINNING_BALANCE_RE.search(text)
        if beginning:
            info['beginning_balance'] = _to_decimal(beginning.group(1))
        ending = ENDING_BALANCE_RE.search(text)
        if ending:
            info['ending_balance'] = _to_decimal(ending.group(1))

        info['statement_year'] = infer_year(info['statement_period'], today=today)
        logger.debug("Account info: account=%s period=%s year=%s", info['account_number'],
                     info['statement_period'], info['statement_year'])
        return info

    def extract_period(self, text: str) -> Optional[Dict]:
        """Statement period as {'start', 'end'} strings, or None."""
        match = PERIOD_SLASH_RE.search(text) or PERIOD_THROUGH_RE.search(text)
        if not match:
            return None
        return {'start': match.group(1).strip(), 'end': match.group(2).strip()}

    def extract_company_info(self, text: str) -> Dict:
        """
        Company name and address from the first lines of the statement

        Returns:
            {'name': str, 'address': str, 'extracted': bool}
        """
        name = ''
        address = ''
        street_found = False

        lines = [l.strip() for l in (text or '').splitlines() if l.strip()]
        for line in lines[:self.scan_lines]:
            if BOILERPLATE_RE.search(line) or NUMERIC_LINE_RE.match(line):
                continue

            if not name:
                name = self._match_business_name(line)
                if name:
                    continue

            if STREET_ADDRESS_RE.match(line):
                if not street_found:
                    address = line
                    street_found = True
            elif not address and CITY_STATE_ZIP_RE.match(line):
                address = line

            if name and street_found:
                break

        return {'name': name, 'address': address, 'extracted': bool(name or address)}

    def _match_business_name(self, line: str) -> str:
        for pattern in BUSINESS_NAME_PATTERNS:
            match = pattern.match(line)
            if match:
                return match.group(1).strip()
        return ''
