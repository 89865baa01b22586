"""Question validation and vector retrieval."""

import logging

from pdfqa.constants import DEFAULT_TOP_K, MAX_QUESTION_LENGTH
from pdfqa.errors import InvalidInputError, NotFoundError, UpstreamError
from pdfqa.llm.base import LLMService
from pdfqa.service.database.models import RetrievedChunk
from pdfqa.service.database.store import ChunkStore

logger = logging.getLogger(__name__)


def normalize_question(question: str | None, max_length: int = MAX_QUESTION_LENGTH) -> str:
    """Trim a question and cut it to ``max_length`` characters.

    Raises:
        InvalidInputError: If the question is missing or blank
    """
    if question is None:
        raise InvalidInputError("Missing 'question' field in request")
    if not isinstance(question, str) or not question.strip():
        raise InvalidInputError("Question must not be empty")

    question = question.strip()
    if len(question) > max_length:
        logger.info(f"✂️ Truncating question from {len(question)} to {max_length} characters")
        question = question[:max_length]
    return question


class Retriever:
    """Embeds a question and fetches the most similar chunks from the store."""

    def __init__(
        self,
        store: ChunkStore,
        embedder: LLMService,
        top_k: int = DEFAULT_TOP_K,
        max_question_length: int = MAX_QUESTION_LENGTH,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.top_k = top_k
        self.max_question_length = max_question_length

    def retrieve(self, question: str, document_id: str | None = None) -> list[RetrievedChunk]:
        """Return the top-k chunks for a question, most relevant first.

        When ``document_id`` is given the document must exist; it is checked
        before any embedding work is done. An empty list means nothing
        relevant was found and is not an error.

        Raises:
            InvalidInputError: If the question is blank
            NotFoundError: If document_id does not resolve
            UpstreamError: If the store or the embedding provider fails
        """
        question = normalize_question(question, self.max_question_length)
        document_id = document_id or None

        if document_id is not None:
            try:
                document = self.store.get_document(document_id)
            except Exception as e:
                raise UpstreamError("Failed to look up document", details=str(e)) from e
            if document is None:
                logger.warning(f"❌ Document not found: {document_id}")
                raise NotFoundError("Document not found")

        try:
            embedding = self.embedder.generate_embeddings([question])[0]
        except Exception as e:
            raise UpstreamError("Failed to embed question", details=str(e)) from e

        try:
            chunks = self.store.similarity_search(
                embedding, limit=self.top_k, document_id=document_id
            )
        except Exception as e:
            raise UpstreamError("Failed to search document chunks", details=str(e)) from e

        logger.info(f"✅ Retrieved {len(chunks)} chunks")
        return chunks
