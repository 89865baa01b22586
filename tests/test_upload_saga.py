"""Tests for the UploadSaga rollback behavior."""

import pytest

from pdfqa.service.ingest import PageChunk
from pdfqa.errors import PartialFailureError, UpstreamError
from pdfqa.service.upload_saga import UploadSaga, UploadState


@pytest.fixture
def page_chunks():
    return [
        PageChunk("Introduction to the topic", 1, 0),
        PageChunk("Methods used in the study", 1, 1),
        PageChunk("Results and discussion", 2, 2),
    ]


class TestUploadSagaSuccess:
    """Tests for a saga that commits."""

    @pytest.mark.asyncio
    async def test_commits_document_and_chunks(self, fake_store, fake_llm, page_chunks):
        saga = UploadSaga(fake_store, fake_llm)

        document = await saga.run("paper.pdf", 2, page_chunks)

        assert saga.state is UploadState.COMMITTED
        assert document.total_chunks == 3
        assert fake_store.documents[document.Id].total_chunks == 3
        stored = fake_store.chunks_for(document.Id)
        assert [c.chunk_index for c in stored] == [0, 1, 2]
        assert [c.page_number for c in stored] == [1, 1, 2]
        assert stored[0].Id == f"{document.Id}_chunk_0"

    @pytest.mark.asyncio
    async def test_each_chunk_embedded_from_its_content(self, fake_store, fake_llm, page_chunks):
        saga = UploadSaga(fake_store, fake_llm, embedding_batch_size=2)

        document = await saga.run("paper.pdf", 2, page_chunks)

        assert sorted(fake_llm.embedded_texts) == sorted(c.content for c in page_chunks)
        for chunk in fake_store.chunks_for(document.Id):
            assert chunk.embedding == fake_llm.embed(chunk.content)

    @pytest.mark.asyncio
    async def test_inserts_in_batches(self, fake_store, fake_llm):
        chunks = [PageChunk(f"chunk {i}", 1, i) for i in range(5)]
        saga = UploadSaga(fake_store, fake_llm, insert_batch_size=2)

        document = await saga.run("paper.pdf", 1, chunks)

        assert fake_store.calls.count("insert_chunks") == 3
        assert document.total_chunks == 5

    @pytest.mark.asyncio
    async def test_saga_runs_only_once(self, fake_store, fake_llm, page_chunks):
        saga = UploadSaga(fake_store, fake_llm)
        await saga.run("paper.pdf", 2, page_chunks)

        with pytest.raises(RuntimeError):
            await saga.run("paper.pdf", 2, page_chunks)


class TestUploadSagaRollback:
    """Tests for failures at each saga step."""

    @pytest.mark.asyncio
    async def test_document_create_failure(self, fake_store, fake_llm, page_chunks):
        fake_store.failures["create_document"] = RuntimeError("database unavailable")
        saga = UploadSaga(fake_store, fake_llm)

        with pytest.raises(UpstreamError) as exc_info:
            await saga.run("paper.pdf", 2, page_chunks)

        assert not isinstance(exc_info.value, PartialFailureError)
        assert exc_info.value.message == "Failed to store document in database"
        assert fake_llm.embedded_texts == []
        assert saga.state is UploadState.ROLLED_BACK

    @pytest.mark.asyncio
    async def test_embedding_failure_removes_document(self, fake_store, fake_llm, page_chunks):
        fake_llm.embedding_error = ConnectionError("embedding service down")
        saga = UploadSaga(fake_store, fake_llm)

        with pytest.raises(PartialFailureError) as exc_info:
            await saga.run("paper.pdf", 2, page_chunks)

        assert exc_info.value.message == "Failed to create embeddings"
        assert fake_store.documents == {}
        assert fake_store.chunks == {}
        assert saga.state is UploadState.ROLLED_BACK

    @pytest.mark.asyncio
    async def test_insert_failure_removes_document_and_chunks(
        self, fake_store, fake_llm, page_chunks
    ):
        fake_store.failures["insert_chunks"] = RuntimeError("write rejected")
        saga = UploadSaga(fake_store, fake_llm)

        with pytest.raises(PartialFailureError) as exc_info:
            await saga.run("paper.pdf", 2, page_chunks)

        assert exc_info.value.message == "Failed to store chunks"
        assert fake_store.documents == {}
        assert fake_store.chunks == {}

    @pytest.mark.asyncio
    async def test_second_insert_batch_failure_removes_first_batch(self, fake_store, fake_llm):
        chunks = [PageChunk(f"chunk {i}", 1, i) for i in range(4)]
        original_insert = fake_store.insert_chunks
        batches = []

        def flaky_insert(batch):
            batches.append(batch)
            if len(batches) == 2:
                raise RuntimeError("write rejected")
            return original_insert(batch)

        fake_store.insert_chunks = flaky_insert
        saga = UploadSaga(fake_store, fake_llm, insert_batch_size=2)

        with pytest.raises(PartialFailureError):
            await saga.run("paper.pdf", 1, chunks)

        assert fake_store.documents == {}
        assert fake_store.chunks == {}

    @pytest.mark.asyncio
    async def test_chunk_count_update_failure_rolls_back(
        self, fake_store, fake_llm, page_chunks
    ):
        fake_store.failures["update_chunk_count"] = RuntimeError("conflict")
        saga = UploadSaga(fake_store, fake_llm)

        with pytest.raises(PartialFailureError) as exc_info:
            await saga.run("paper.pdf", 2, page_chunks)

        assert exc_info.value.message == "Failed to update document"
        assert fake_store.documents == {}
        assert fake_store.chunks == {}
        assert saga.state is UploadState.ROLLED_BACK

    @pytest.mark.asyncio
    async def test_compensation_failure_still_raises_original_error(
        self, fake_store, fake_llm, page_chunks
    ):
        fake_llm.embedding_error = ConnectionError("embedding service down")
        fake_store.failures["delete_document"] = RuntimeError("delete failed")
        saga = UploadSaga(fake_store, fake_llm)

        with pytest.raises(PartialFailureError) as exc_info:
            await saga.run("paper.pdf", 2, page_chunks)

        assert exc_info.value.message == "Failed to create embeddings"
        assert saga.state is UploadState.ROLLED_BACK
