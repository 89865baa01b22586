"""Upload writer: document row, chunk embeddings and chunk rows.

The writes are not transactional, so they run as a saga. Each forward step
is paired with a compensating step, and a failure undoes the completed steps
in reverse order. No document row survives a failed upload.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

from pdfqa.service.ingest import PageChunk
from pdfqa.constants import EMBEDDING_BATCH_SIZE, INSERT_BATCH_SIZE
from pdfqa.errors import PartialFailureError, UpstreamError
from pdfqa.llm.base import LLMService
from pdfqa.service.database.models import Document, DocumentChunk
from pdfqa.service.database.store import ChunkStore, chunk_id_for

logger = logging.getLogger(__name__)


class UploadState(Enum):
    STARTED = "started"
    DOCUMENT_CREATED = "document_created"
    CHUNKS_PERSISTED = "chunks_persisted"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class SagaStep:
    """A forward action, the state it leads to, and how to undo it."""

    name: str
    action: Callable[[], Awaitable[None]]
    reaches: UploadState
    error_message: str
    compensation: Callable[[], Awaitable[None]] | None = None


class UploadSaga:
    """Writes one document and its chunks, rolling back on failure.

    A saga instance handles a single upload.
    """

    def __init__(
        self,
        store: ChunkStore,
        embedder: LLMService,
        embedding_batch_size: int = EMBEDDING_BATCH_SIZE,
        insert_batch_size: int = INSERT_BATCH_SIZE,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.embedding_batch_size = embedding_batch_size
        self.insert_batch_size = insert_batch_size
        self.state = UploadState.STARTED
        self.document: Document | None = None
        self._chunks: list[PageChunk] = []
        self._embedded: list[DocumentChunk] = []
        self._persisted = 0

    async def run(self, filename: str, total_pages: int, chunks: list[PageChunk]) -> Document:
        """Execute every step, or roll back and raise.

        Returns:
            Document: The committed document with its final chunk count

        Raises:
            UpstreamError: If the document row could not be created
            PartialFailureError: If a later step failed (after rollback)
        """
        if self.state is not UploadState.STARTED:
            raise RuntimeError(f"Upload saga already ran (state: {self.state.value})")

        self._chunks = chunks
        steps = [
            SagaStep(
                name="create document",
                action=lambda: self._create_document(filename, total_pages),
                reaches=UploadState.DOCUMENT_CREATED,
                error_message="Failed to store document in database",
                compensation=self._delete_document,
            ),
            SagaStep(
                name="embed chunks",
                action=self._embed_chunks,
                reaches=UploadState.DOCUMENT_CREATED,
                error_message="Failed to create embeddings",
            ),
            SagaStep(
                name="insert chunks",
                action=self._insert_chunks,
                reaches=UploadState.CHUNKS_PERSISTED,
                error_message="Failed to store chunks",
                compensation=self._delete_chunks,
            ),
            SagaStep(
                name="update chunk count",
                action=self._update_chunk_count,
                reaches=UploadState.COMMITTED,
                error_message="Failed to update document",
            ),
        ]

        completed: list[SagaStep] = []
        for step in steps:
            try:
                await step.action()
            except Exception as e:
                logger.error(f"❌ Upload step '{step.name}' failed: {e}", exc_info=True)
                await self._rollback(completed)
                if not completed:
                    raise UpstreamError(step.error_message, details=str(e)) from e
                raise PartialFailureError(step.error_message, details=str(e)) from e
            completed.append(step)
            self.state = step.reaches
            logger.debug(f"Upload step '{step.name}' done, state={self.state.value}")

        logger.info(f"✅ Stored document {self.document.Id} with {self._persisted} chunks")
        return self.document

    async def _rollback(self, completed: list[SagaStep]) -> None:
        for step in reversed(completed):
            if step.compensation is None:
                continue
            try:
                await step.compensation()
            except Exception as e:
                logger.error(f"❌ Compensation for '{step.name}' failed: {e}", exc_info=True)
        self.state = UploadState.ROLLED_BACK
        logger.info("↩️ Upload rolled back")

    async def _create_document(self, filename: str, total_pages: int) -> None:
        self.document = await asyncio.to_thread(self.store.create_document, filename, total_pages)
        logger.info(f"📝 Document stored with ID: {self.document.Id}")

    async def _delete_document(self) -> None:
        # Also removes any chunk rows written by a partially failed insert.
        await asyncio.to_thread(self.store.delete_document, self.document.Id)

    async def _embed_chunks(self) -> None:
        logger.info(f"🧮 Creating embeddings for {len(self._chunks)} chunks...")
        for start in range(0, len(self._chunks), self.embedding_batch_size):
            batch = self._chunks[start : start + self.embedding_batch_size]
            self._embedded.extend(await self._embed_batch(batch))

    async def _embed_batch(self, batch: list[PageChunk]) -> list[DocumentChunk]:
        results = await asyncio.gather(
            *(
                asyncio.to_thread(self.embedder.generate_embeddings, [chunk.content])
                for chunk in batch
            )
        )
        return [
            DocumentChunk(
                Id=chunk_id_for(self.document.Id, chunk.chunk_index),
                document_id=self.document.Id,
                content=chunk.content,
                page_number=chunk.page_number,
                chunk_index=chunk.chunk_index,
                embedding=list(vectors[0]),
            )
            for chunk, vectors in zip(batch, results)
        ]

    async def _insert_chunks(self) -> None:
        for start in range(0, len(self._embedded), self.insert_batch_size):
            batch = self._embedded[start : start + self.insert_batch_size]
            self._persisted += await asyncio.to_thread(self.store.insert_chunks, batch)

    async def _delete_chunks(self) -> None:
        await asyncio.to_thread(self.store.delete_chunks, self.document.Id)

    async def _update_chunk_count(self) -> None:
        await asyncio.to_thread(self.store.update_chunk_count, self.document.Id, self._persisted)
        self.document.total_chunks = self._persisted
