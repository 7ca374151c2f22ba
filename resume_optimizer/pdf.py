import io
import logging

from pypdf import PdfReader

logger = logging.getLogger(__name__)


def extract_pdf_text(pdf_bytes: bytes) -> str:
    """Return the text of every page joined by newlines, untrimmed.

    Library errors (corrupt or encrypted files) propagate to the caller.
    """
    reader = PdfReader(io.BytesIO(pdf_bytes))
    pages = [page.extract_text() or "" for page in reader.pages]
    logger.debug("Extracted %d page(s) from PDF", len(pages))
    return "\n".join(pages)
