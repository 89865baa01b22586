"""Context assembly and citation building for retrieved chunks."""

import re
from dataclasses import dataclass
from typing import Any

from pdfqa.constants import CITATION_EXCERPT_LENGTH, MAX_CONTEXT_CHUNK_LENGTH
from pdfqa.service.database.models import RetrievedChunk

_WHITESPACE_RUN = re.compile(r"\s+")


@dataclass(frozen=True)
class Citation:
    """A pointer from an answer back to one retrieved chunk."""

    page: int
    text: str
    similarity: float

    def to_dict(self) -> dict[str, Any]:
        return {"page": self.page, "text": self.text, "similarity": self.similarity}


def collapse_whitespace(text: str) -> str:
    """Replace every whitespace run with a single space and trim."""
    return _WHITESPACE_RUN.sub(" ", text).strip()


def format_chunk(chunk: RetrievedChunk, max_length: int = MAX_CONTEXT_CHUNK_LENGTH) -> str:
    """Render one chunk as a page-marked context block."""
    content = collapse_whitespace(chunk.content)[:max_length]
    return f"[Page {chunk.page_number}]: {content}"


def assemble_context(
    chunks: list[RetrievedChunk], max_chunk_length: int = MAX_CONTEXT_CHUNK_LENGTH
) -> str:
    """Format retrieved chunks into the context block sent to the model.

    Chunks keep the order the store ranked them in. Each chunk's content is
    whitespace-normalised and cut to ``max_chunk_length`` characters, which
    together with a fixed top-k bounds the prompt size.

    Args:
        chunks: Retrieved chunks, most relevant first

    Returns:
        Context string, or "" when there are no chunks
    """
    return "\n\n".join(format_chunk(chunk, max_chunk_length) for chunk in chunks)


def build_citations(
    chunks: list[RetrievedChunk], excerpt_length: int = CITATION_EXCERPT_LENGTH
) -> list[Citation]:
    """Build one citation per chunk, in the same order."""
    return [
        Citation(
            page=chunk.page_number,
            text=chunk.content[:excerpt_length] + "...",
            similarity=chunk.similarity,
        )
        for chunk in chunks
    ]
