"""End-to-end tests for RAGPipeline on in-memory collaborators."""

import pytest

from pdfqa.constants import NO_RESULTS_ANSWER
from pdfqa.errors import InvalidInputError, NotFoundError, PartialFailureError
from pdfqa.service.pipeline import AskResult, PipelineConfig, RAGPipeline, UploadResult


class TestUpload:
    """Tests for RAGPipeline.upload."""

    @pytest.mark.asyncio
    async def test_single_page_pdf_becomes_one_chunk(self, pipeline, fake_store, make_pdf):
        """A one-page "Hello world" PDF is stored as exactly one chunk."""
        result = await pipeline.upload("hello.pdf", make_pdf(["Hello world"]), "application/pdf")

        assert isinstance(result, UploadResult)
        assert result.chunks == 1
        assert result.document.total_chunks == 1
        assert result.document.total_pages == 1
        stored = fake_store.chunks_for(result.document.Id)
        assert len(stored) == 1
        assert stored[0].page_number == 1
        assert stored[0].chunk_index == 0
        assert stored[0].content == "Hello world"

    @pytest.mark.asyncio
    async def test_multi_page_chunks_keep_page_numbers(self, fake_store, fake_llm, make_pdf):
        config = PipelineConfig(chunk_size=20, chunk_overlap=5)
        pipeline = RAGPipeline(fake_store, fake_llm, config)
        data = make_pdf(["First page has some text", "", "Third page text"])

        result = await pipeline.upload("paper.pdf", data, "application/pdf")

        stored = fake_store.chunks_for(result.document.Id)
        assert result.document.total_pages == 3
        assert [c.chunk_index for c in stored] == list(range(len(stored)))
        assert {c.page_number for c in stored} == {1, 3}
        assert result.chunks == len(stored)

    @pytest.mark.asyncio
    async def test_non_pdf_rejected(self, pipeline, fake_store):
        with pytest.raises(InvalidInputError):
            await pipeline.upload("notes.txt", b"plain text", "text/plain")
        assert fake_store.calls == []

    @pytest.mark.asyncio
    async def test_unparsable_pdf_rejected(self, pipeline, fake_store):
        with pytest.raises(InvalidInputError) as exc_info:
            await pipeline.upload("broken.pdf", b"this is not a pdf", "application/pdf")

        assert exc_info.value.message == "Failed to parse PDF"
        assert fake_store.calls == []

    @pytest.mark.asyncio
    async def test_pdf_without_text_rejected(self, pipeline, fake_store, make_pdf):
        with pytest.raises(InvalidInputError) as exc_info:
            await pipeline.upload("blank.pdf", make_pdf([""]), "application/pdf")

        assert "empty" in exc_info.value.message
        assert fake_store.documents == {}

    @pytest.mark.asyncio
    async def test_embedding_failure_leaves_no_document(
        self, pipeline, fake_store, fake_llm, make_pdf
    ):
        fake_llm.embedding_error = ConnectionError("embedding service down")

        with pytest.raises(PartialFailureError):
            await pipeline.upload("hello.pdf", make_pdf(["Hello world"]), "application/pdf")

        assert fake_store.documents == {}
        assert fake_store.chunks == {}


class TestAsk:
    """Tests for RAGPipeline.ask."""

    @pytest.mark.asyncio
    async def test_unknown_document_is_not_found(self, pipeline, fake_llm):
        """An unknown documentId fails without any embedding call."""
        with pytest.raises(NotFoundError) as exc_info:
            await pipeline.ask("What is this?", "missing-document")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Document not found"
        assert fake_llm.embedded_texts == []

    @pytest.mark.asyncio
    async def test_three_chunks_become_context_and_citations(
        self, pipeline, fake_store, fake_llm, make_retrieved_chunk
    ):
        """Retrieved chunks keep their order in both context and citations."""
        document = fake_store.create_document("paper.pdf", 9)
        fake_store.search_results = [
            make_retrieved_chunk("Top\n\nranked   chunk", page_number=5, similarity=0.91),
            make_retrieved_chunk("z" * 2000, page_number=2, chunk_index=1, similarity=0.77),
            make_retrieved_chunk("Third chunk", page_number=9, chunk_index=2, similarity=0.5),
        ]

        result = await pipeline.ask("What is ranked?", document.Id)

        assert isinstance(result, AskResult)
        prompt = fake_llm.messages_received[0][1]["content"]
        expected_context = "\n\n".join(
            [
                "[Page 5]: Top ranked chunk",
                "[Page 2]: " + "z" * 1200,
                "[Page 9]: Third chunk",
            ]
        )
        assert expected_context in prompt
        assert [c.page for c in result.citations] == [5, 2, 9]
        assert [c.similarity for c in result.citations] == [0.91, 0.77, 0.5]
        assert result.answer == fake_llm.answer

    @pytest.mark.asyncio
    async def test_no_matches_returns_fallback(self, pipeline, fake_store, fake_llm):
        document = fake_store.create_document("empty.pdf", 1)

        result = await pipeline.ask("Anything?", document.Id)

        assert result.answer == NO_RESULTS_ANSWER
        assert result.citations == []
        assert fake_llm.messages_received == []

    @pytest.mark.asyncio
    async def test_long_question_truncated_once(self, fake_store, fake_llm, make_pdf):
        pipeline = RAGPipeline(fake_store, fake_llm, PipelineConfig(max_question_length=20))
        await pipeline.upload("paper.pdf", make_pdf(["Hello world"]), "application/pdf")
        fake_llm.embedded_texts.clear()

        await pipeline.ask("  " + "w" * 50 + "  ")

        assert fake_llm.embedded_texts == ["w" * 20]
        assert len(fake_llm.messages_received) == 1
        user_message = fake_llm.messages_received[0][1]["content"]
        assert "w" * 20 in user_message
        assert "w" * 21 not in user_message

    @pytest.mark.asyncio
    async def test_blank_question_rejected(self, pipeline, fake_llm):
        with pytest.raises(InvalidInputError):
            await pipeline.ask("   ")
        assert fake_llm.embedded_texts == []

    @pytest.mark.asyncio
    async def test_upload_then_ask(self, pipeline, fake_llm, make_pdf):
        upload = await pipeline.upload("hello.pdf", make_pdf(["Hello world"]), "application/pdf")

        result = await pipeline.ask("hello?", upload.document.Id)

        assert len(result.citations) == 1
        assert result.citations[0].page == 1
        assert result.citations[0].text == "Hello world..."
        assert 0.0 <= result.citations[0].similarity <= 1.0
        assert result.to_dict()["answer"] == fake_llm.answer


class TestDocuments:
    """Tests for document listing, lookup and deletion."""

    def test_list_documents(self, pipeline, fake_store):
        fake_store.create_document("a.pdf", 1)
        fake_store.create_document("b.pdf", 2)

        names = sorted(d.filename for d in pipeline.list_documents())

        assert names == ["a.pdf", "b.pdf"]

    def test_get_missing_document(self, pipeline):
        with pytest.raises(NotFoundError):
            pipeline.get_document("missing")

    @pytest.mark.asyncio
    async def test_delete_document_removes_chunks(self, pipeline, fake_store, make_pdf):
        upload = await pipeline.upload("hello.pdf", make_pdf(["Hello world"]), "application/pdf")

        pipeline.delete_document(upload.document.Id)

        assert fake_store.documents == {}
        assert fake_store.chunks == {}

    def test_delete_missing_document(self, pipeline):
        with pytest.raises(NotFoundError):
            pipeline.delete_document("missing")


class TestPipelineConfig:
    """Tests for PipelineConfig.from_env."""

    def test_defaults(self, monkeypatch):
        for name in ("CHUNK_SIZE", "CHUNK_OVERLAP", "TOP_K", "REQUEST_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)

        config = PipelineConfig.from_env()

        assert config.chunk_size == 800
        assert config.chunk_overlap == 100
        assert config.top_k == 5

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("CHUNK_SIZE", "500")
        monkeypatch.setenv("CHUNK_OVERLAP", "50")
        monkeypatch.setenv("TOP_K", "8")
        monkeypatch.setenv("REQUEST_TIMEOUT", "12.5")

        config = PipelineConfig.from_env()

        assert (config.chunk_size, config.chunk_overlap, config.top_k) == (500, 50, 8)
        assert config.request_timeout == 12.5
