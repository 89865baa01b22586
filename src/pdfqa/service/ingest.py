"""PDF ingestion: page-level text extraction and chunking."""

import logging
from dataclasses import dataclass

import fitz  # PyMuPDF

from pdfqa.constants import (
    ALLOWED_EXTENSIONS,
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    MAX_CHUNKS_PER_DOCUMENT,
    MAX_UPLOAD_SIZE_BYTES,
    PDF_MIME_TYPE,
)
from pdfqa.errors import InvalidInputError, PayloadTooLargeError
from pdfqa.service.context import collapse_whitespace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageChunk:
    """A chunk of page text that has not been embedded yet."""

    content: str
    page_number: int
    chunk_index: int


def allowed_file(filename: str) -> bool:
    """Check if the file extension is allowed.

    Args:
        filename: The filename to check

    Returns:
        True if extension is allowed, False otherwise
    """
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_EXTENSIONS


def validate_upload(filename: str | None, content_type: str | None, size: int) -> None:
    """Reject uploads that are missing, not PDFs, or too large.

    A file is accepted as a PDF when either its declared MIME type or its
    filename suffix says so.

    Raises:
        InvalidInputError: If no file was given or it is not a PDF
        PayloadTooLargeError: If the file exceeds MAX_UPLOAD_SIZE_BYTES
    """
    if not filename:
        raise InvalidInputError("No file provided")

    mime_type = (content_type or "").split(";", 1)[0].strip().lower()
    if mime_type != PDF_MIME_TYPE and not allowed_file(filename):
        raise InvalidInputError("Unsupported file type. Please upload a PDF.")

    if size > MAX_UPLOAD_SIZE_BYTES:
        raise PayloadTooLargeError(
            "File too large",
            details=f"Maximum upload size is {MAX_UPLOAD_SIZE_BYTES // (1024 * 1024)}MB",
        )


def extract_pages_from_pdf(data: bytes) -> list[str]:
    """Extract the text of every page of a PDF.

    Args:
        data: Raw PDF bytes

    Returns:
        list[str]: One whitespace-normalised string per page, in page order.
        Pages without extractable text yield an empty string so that list
        positions keep matching page numbers.
    """
    doc = fitz.open(stream=data, filetype="pdf")
    try:
        pages = [collapse_whitespace(page.get_text()) for page in doc]
    finally:
        doc.close()

    logger.info(f"📄 PDF parsed. Pages: {len(pages)}")
    return pages


def chunk_text(
    text: str, chunk_size: int = DEFAULT_CHUNK_SIZE, overlap: int = DEFAULT_CHUNK_OVERLAP
) -> list[str]:
    """Split text into overlapping fixed-size character windows.

    Each window is ``chunk_size`` characters of the trimmed text; the next
    window starts ``chunk_size - overlap`` characters later, so consecutive
    chunks share ``overlap`` characters. The last window may be shorter.

    Args:
        text: The text to chunk
        chunk_size: Characters per chunk (default: 800)
        overlap: Characters shared by consecutive chunks (default: 100)

    Returns:
        list[str]: Text chunks, empty for empty or whitespace-only input

    Raises:
        ValueError: If chunk_size <= 0 or overlap is outside [0, chunk_size)
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if overlap < 0 or overlap >= chunk_size:
        raise ValueError(f"overlap must be in [0, {chunk_size}), got {overlap}")

    text = text.strip()
    if not text:
        return []
    if len(text) <= chunk_size:
        return [text]

    step = chunk_size - overlap
    chunks = []
    start = 0
    while True:
        chunks.append(text[start : start + chunk_size])
        if start + chunk_size >= len(text):
            break
        start += step

    return chunks


def chunk_pages(
    pages: list[str],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
    max_chunks: int = MAX_CHUNKS_PER_DOCUMENT,
) -> list[PageChunk]:
    """Chunk every page of a document, numbering chunks across pages.

    Args:
        pages: Page texts in page order (page 1 first)
        chunk_size: Characters per chunk
        overlap: Characters shared by consecutive chunks
        max_chunks: Maximum number of chunks kept for the document

    Returns:
        list[PageChunk]: Chunks in reading order with contiguous chunk_index
        values starting at 0
    """
    chunks: list[PageChunk] = []
    chunk_index = 0

    for page_number, page_text in enumerate(pages, start=1):
        for content in chunk_text(collapse_whitespace(page_text), chunk_size, overlap):
            chunks.append(PageChunk(content, page_number, chunk_index))
            chunk_index += 1

    if len(chunks) > max_chunks:
        logger.warning(f"⚠️ Dropping {len(chunks) - max_chunks} chunks over the limit of {max_chunks}")
        chunks = chunks[:max_chunks]

    logger.info(f"  Created {len(chunks)} chunks from {len(pages)} pages")
    return chunks
