from io import BytesIO
import pdfplumber
from loguru import logger
from .invoice_types import ParseFailure


def decode_pdf_lines(file_bytes: bytes) -> list[str]:
    """
    Decode a PDF into its non-empty text lines, page by page.

    Raises:
        ParseFailure: the bytes are empty or cannot be read as a PDF
    """
    if not file_bytes:
        raise ParseFailure("Empty file: nothing to decode")

    logger.info(f"Decoding PDF of size {len(file_bytes)} bytes")

    try:
        with pdfplumber.open(BytesIO(file_bytes)) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
    except Exception as e:
        logger.error(f"PDF decoding failed: {str(e)}")
        raise ParseFailure(f"Failed to parse PDF file: {str(e)}") from e

    lines = [line for line in "\n".join(pages).splitlines() if line.strip()]
    if not lines:
        logger.warning("PDF decoded but contained no text (scanned image?)", page_count=len(pages))
    return lines
