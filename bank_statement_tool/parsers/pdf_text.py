"""
PDF text extraction with pdfplumber (text-based PDFs only, no OCR)
"""

import logging
import os

import pdfplumber

from ..exceptions import UnreadableStatementError

logger = logging.getLogger(__name__)


def extract_pdf_text(file_path: str) -> str:
    """
    Extract the full text of a PDF, pages joined by newlines

    Raises:
        UnreadableStatementError: file missing, not a PDF, or no text layer
    """
    if not os.path.exists(file_path):
        raise UnreadableStatementError("File not found: %s" % file_path)

    pages = []
    try:
        with pdfplumber.open(file_path) as pdf:
            for page in pdf.pages:
                page_text = page.extract_text()
                if page_text:
                    pages.append(page_text)
    except Exception as e:
        raise UnreadableStatementError("Could not read PDF %s: %s" % (file_path, e)) from e

    text = '\n'.join(pages)
    if not text.strip():
        raise UnreadableStatementError("No text layer in %s (scanned PDF?)" % file_path)

    logger.info("Extracted %d characters from %s", len(text), os.path.basename(file_path))
    return text


def read_statement_text(file_path: str) -> str:
    """Statement text from a .pdf, or a .txt holding already-extracted text."""
    if file_path.lower().endswith('.pdf'):
        return extract_pdf_text(file_path)
    try:
        with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
            return f.read()
    except OSError as e:
        raise UnreadableStatementError("Could not read %s: %s" % (file_path, e)) from e
