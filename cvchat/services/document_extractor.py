import re
import unicodedata

import fitz  #pyMuPDF

from cvchat.errors import UnreadableDocument
from cvchat.utils.logger import get_logger

logger = get_logger(__name__)


def _clean_text(text):
    """Normalize unicode and collapse runs of blanks and empty lines."""
    text = unicodedata.normalize("NFC", text or "")
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n\s*\n\s*\n", "\n\n", text)
    return text.strip()


def extract_pdf_text(data: bytes, min_chars: int = 1, error_message: str = None) -> str:
    """
    Extract plain text from an in-memory PDF using PyMuPDF text blocks,
    ordered top-to-bottom then left-to-right.

    Raises UnreadableDocument when the payload is not a readable PDF or when
    fewer than `min_chars` characters of text come out (scanned PDFs are not OCR'd).
    """
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except (fitz.FileDataError, RuntimeError, ValueError) as e:
        logger.warning("PDF could not be opened: %s", e)
        raise UnreadableDocument(error_message) from e

    try:
        all_blocks = []
        for page in doc:
            # block_type 0 is text, 1 is an image placeholder
            blocks = [b for b in page.get_text("blocks") if b[6] == 0]
            blocks.sort(key=lambda b: (b[1], b[0]))
            all_blocks.extend(blocks)
    finally:
        doc.close()

    full_text = _clean_text("\n".join(block[4] for block in all_blocks))

    if len(full_text) < min_chars:
        logger.info("PDF rejected: %d readable characters (minimum %d)", len(full_text), min_chars)
        raise UnreadableDocument(error_message)
    return full_text
