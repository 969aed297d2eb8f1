"""
Parsers Package - Bank statement text parsing

1. StatementParser (statement_parser.py) - full pipeline, returns the parse result
2. SectionExtractor (section_extractor.py) - header/total anchored sections
3. LineParser (line_parser.py) - per-section line grammars
4. FallbackLineScanner (fallback_scanner.py) - whole-document pass on low yield
5. HeaderExtractor (header_extractor.py) - account info and company header
"""

from .section_extractor import SectionExtractor
from .line_parser import LineParser
from .fallback_scanner import FallbackLineScanner
from .header_extractor import HeaderExtractor
from .statement_parser import StatementParser, parse_statement
from .pdf_text import extract_pdf_text, read_statement_text

__all__ = [
    'SectionExtractor',
    'LineParser',
    'FallbackLineScanner',
    'HeaderExtractor',
    'StatementParser',
    'parse_statement',
    'extract_pdf_text',
    'read_statement_text',
]
