"""
Line Parser - Section-specific line grammars for Chase-style statements

Every parse method returns a transaction dict or None. Lines that fail a
grammar, or carry an invalid date or out-of-range amount, are dropped and
logged at DEBUG level.
"""

import logging
import re
from typing import Dict, List, Optional

from ..config import ELECTRONIC_LOOKAHEAD, MERCHANT_MAX_WORDS
from .utils import build_transaction, normalize_whitespace

logger = logging.getLogger(__name__)

# Amount with thousands separators, or a plain decimal amount
AMOUNT = r'(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2}'
DATE = r'\d{1,2}/\d{1,2}'

SKIP_LINE_RE = re.compile(
    r'^(?:DATE\b|DESCRIPTION\b|AMOUNT\b|CHECK\s+(?:NO|NUMBER)\b|Total\b|\(continued\)|Page\s+\d+\s+of\s+\d+)',
    re.IGNORECASE)
DATE_LINE_RE = re.compile(r'^' + DATE + r'\b')

# 01/05 Deposit 1 $500.00 / 01/19 Remote Online Deposit 1 2,500.00
DEPOSIT_LINE_RE = re.compile(r'^(' + DATE + r')\s*(.*?)\s*(\$?)(' + AMOUNT + r')\s*$')
# Item number "1" fused into the amount: "Remote Online Deposit 12,910.00"
FUSED_ITEM_DESC_RE = re.compile(r'\bOnline Deposit$', re.IGNORECASE)
FUSED_ITEM_AMOUNT_RE = re.compile(r'^1(\d{1,3}(?:,\d{3})*\.\d{2})$')

# 533 ^ 01/03 01/03 400.00 / 538 * ^ 01/19 2,500.00
CHECK_LINE_RE = re.compile(
    r'^(\d+)(?=[^\w/])\s*(?:[^\w\s/]\s*)*(' + DATE + r')(?:\s+(' + DATE + r'))?\s*\$?(' + AMOUNT + r')\s*$')

# 01/02 Card Purchase 12/29 Chevron 0202648 Plantation FL Card 1819 $38.80
CARD_LINE_RE = re.compile(
    r'^(' + DATE + r')\s*((?:Recurring\s+)?Card Purchase(?:\s+With Pin)?\s*(?:' + DATE + r'\s+)?'
    r'(.+?)\s+([A-Z]{2})\s+Card\s+\d{4})\s*\$?(' + AMOUNT + r')\s*$')
CARD_PREFIX_RE = re.compile(
    r'^(?:Recurring\s+)?Card Purchase(?:\s+With Pin)?\s*(?:' + DATE + r'\s+)?', re.IGNORECASE)
CARD_SUFFIX_RE = re.compile(r'\s*\bCard\s+\d{4}\s*$', re.IGNORECASE)
STATE_SUFFIX_RE = re.compile(r'\s+[A-Z]{2}$')
STORE_ID_RE = re.compile(r'\s+#?\d{4,}\b')

# 01/11 Orig CO Name:Home Depot Orig ID:... (amount here or on a following line)
CO_NAME_RE = re.compile(r'^(' + DATE + r')\s*.*?Orig CO Name:\s*(.+?)(?=\s*Orig\b|$)')
COMPANY_ID_RE = re.compile(r'\s+ID:.*$')
TRAILING_AMOUNT_RE = re.compile(r'\s*\$?' + AMOUNT + r'\s*$')
ANY_AMOUNT_RE = re.compile(r'\$?(' + AMOUNT + r')')
BARE_AMOUNT_RE = re.compile(r'^\$?(' + AMOUNT + r')$')

# 01/15 Online Transfer To Chk ...1234 Transaction#: 123 $500.00
GENERIC_LINE_RE = re.compile(r'^(' + DATE + r')\s+(.+?)\s+\$?(' + AMOUNT + r')\s*$')


def is_skippable(line: str) -> bool:
    return not line or bool(SKIP_LINE_RE.match(line))


def split_fused_item(description: str, amount: str, has_dollar: bool):
    """Undo "Online Deposit 1 2,910.00" collapsing into "Online Deposit 12,910.00"."""
    if has_dollar or not FUSED_ITEM_DESC_RE.search(description):
        return description, amount
    match = FUSED_ITEM_AMOUNT_RE.match(amount)
    if not match:
        return description, amount
    return description + ' 1', match.group(1)


def card_merchant(description: str) -> str:
    """Merchant name from a card purchase description."""
    text = normalize_whitespace(description)
    text = CARD_PREFIX_RE.sub('', text)
    text = CARD_SUFFIX_RE.sub('', text)
    text = STATE_SUFFIX_RE.sub('', text)

    store_id = STORE_ID_RE.search(text)
    if store_id:
        text = text[:store_id.start()]
    else:
        words = text.split()
        # trailing word is the city
        if len(words) > 1:
            text = ' '.join(words[:-1])

    return ' '.join(text.split()[:MERCHANT_MAX_WORDS]).strip(' #*-')


def electronic_company(raw: str) -> str:
    company = COMPANY_ID_RE.sub('', raw)
    company = TRAILING_AMOUNT_RE.sub('', company)
    return normalize_whitespace(company)


class LineParser:
    """
    Parse the lines of one statement section into transactions
    """

    def parse_section(self, code: str, text: Optional[str], year: int) -> List[Dict]:
        """
        Parse one section

        Args:
            code: Section code ('deposits', 'checks', 'card', 'electronic')
            text: Section text from SectionExtractor (None when absent)
            year: Statement year used for MM/DD dates

        Returns:
            Transactions in statement order
        """
        if not text:
            return []
        if code == 'electronic':
            return self.parse_electronic_section(text, year)

        line_parsers = {
            'deposits': self.parse_deposit_line,
            'checks': self.parse_check_line,
            'card': self.parse_card_line,
        }
        parse_line = line_parsers.get(code)
        if parse_line is None:
            raise ValueError("Unknown section code: %s" % code)

        transactions = []
        for raw_line in text.splitlines():
            line = raw_line.strip()
            if is_skippable(line):
                continue
            txn = parse_line(line, year)
            if txn:
                transactions.append(txn)
            else:
                logger.debug("[%s] unparsed line: %s", code, line)
        return transactions

    # =========================================================================
    # DEPOSITS
    # =========================================================================

    def parse_deposit_line(self, line: str, year: int,
                           section_code: str = 'deposits') -> Optional[Dict]:
        """DATE + description + trailing amount, with or without '$'."""
        match = DEPOSIT_LINE_RE.match(line.strip())
        if not match:
            return None
        date_str, description, dollar, amount = match.groups()
        description, amount = split_fused_item(description.strip(), amount, bool(dollar))
        return build_transaction(date_str, year, description, amount, section_code,
                                 txn_type='income')

    # =========================================================================
    # CHECKS
    # =========================================================================

    def parse_check_line(self, line: str, year: int,
                         section_code: str = 'checks') -> Optional[Dict]:
        """Check number + optional glyphs + date [+ paid date] + amount."""
        match = CHECK_LINE_RE.match(line.strip())
        if not match:
            return None
        check_number, issued, paid, amount = match.groups()
        return build_transaction(paid or issued, year, 'CHECK #%s' % check_number, amount,
                                 section_code, payee='', txn_type='expense',
                                 check_number=check_number)

    # =========================================================================
    # CARD WITHDRAWALS
    # =========================================================================

    def parse_card_line(self, line: str, year: int,
                        section_code: str = 'card') -> Optional[Dict]:
        """
        Card purchase line; other dated lines in the section (ATM
        withdrawals, fees) fall back to the generic grammar.
        """
        line = line.strip()
        match = CARD_LINE_RE.match(line)
        if not match:
            return self.parse_generic_line(line, year, section_code)
        date_str, description = match.group(1), match.group(2)
        return build_transaction(date_str, year, description, match.group(5), section_code,
                                 payee=card_merchant(description), txn_type='expense')

    # =========================================================================
    # ELECTRONIC WITHDRAWALS
    # =========================================================================

    def parse_electronic_section(self, text: str, year: int,
                                 section_code: str = 'electronic') -> List[Dict]:
        """
        Electronic withdrawals span several lines. The dated line announces
        "Orig CO Name:"; the amount is on that line or on a later bare
        amount line before the next dated line or total.
        """
        lines = [l.strip() for l in text.splitlines()]
        transactions = []

        for i, line in enumerate(lines):
            if is_skippable(line):
                continue

            match = CO_NAME_RE.match(line)
            if not match:
                if DATE_LINE_RE.match(line):
                    txn = self.parse_generic_line(line, year, section_code)
                    if txn:
                        transactions.append(txn)
                    else:
                        logger.debug("[%s] unparsed line: %s", section_code, line)
                continue

            company = electronic_company(match.group(2))
            amount = self._same_line_amount(line)
            if amount is None:
                amount = self._lookahead_amount(lines, i + 1)
            if amount is None:
                logger.debug("[%s] no amount for %s", section_code, company)
                continue

            txn = build_transaction(match.group(1), year, 'Electronic Payment: %s' % company,
                                    amount, section_code, payee=company, txn_type='expense')
            if txn:
                transactions.append(txn)

        return transactions

    def _same_line_amount(self, line: str) -> Optional[str]:
        """Last currency value on the announcement line."""
        amounts = ANY_AMOUNT_RE.findall(line)
        return amounts[-1] if amounts else None

    def _lookahead_amount(self, lines: List[str], start: int) -> Optional[str]:
        for nxt in lines[start:start + ELECTRONIC_LOOKAHEAD]:
            if DATE_LINE_RE.match(nxt) or re.match(r'^Total\b', nxt, re.IGNORECASE):
                break
            if 'CO Name' in nxt:
                continue
            match = BARE_AMOUNT_RE.match(nxt)
            if match:
                return match.group(1)
        return None

    # =========================================================================
    # GENERIC
    # =========================================================================

    def parse_generic_line(self, line: str, year: int,
                           section_code: str) -> Optional[Dict]:
        """DATE + description + amount; direction comes from the section."""
        match = GENERIC_LINE_RE.match(line.strip())
        if not match:
            return None
        date_str, description, amount = match.groups()
        return build_transaction(date_str, year, description, amount, section_code)
