"""Answer generation from an assembled context block."""

import asyncio
import logging

from pdfqa.constants import DEFAULT_REQUEST_TIMEOUT, EMPTY_ANSWER, NO_RESULTS_ANSWER
from pdfqa.errors import UpstreamError
from pdfqa.llm.base import LLMService

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that answers questions about a document. "
    "Answer ONLY using the document context provided. Do not use any outside knowledge. "
    "Cite the page numbers you rely on in the form [Page N]. "
    "If the context does not contain enough information to answer, say so clearly."
)


def build_messages(context: str, question: str) -> list[dict]:
    """Build the chat messages for one question.

    Only the current question is sent; earlier turns never reach the model.
    """
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {
            "role": "user",
            "content": (
                "Answer the question using the context below.\n\n"
                f"Context:\n{context}\n\n"
                f"Question: {question}"
            ),
        },
    ]


class AnswerGenerator:
    """Asks the completion model to answer a question from a context block."""

    def __init__(self, llm_service: LLMService, timeout: float = DEFAULT_REQUEST_TIMEOUT) -> None:
        self.llm_service = llm_service
        self.timeout = timeout

    async def generate(self, context: str, question: str) -> str:
        """Generate an answer, or the fixed fallback when context is empty.

        Raises:
            UpstreamError: If the model call fails or times out
        """
        if not context:
            logger.info("ℹ️ No context retrieved, returning fallback answer")
            return NO_RESULTS_ANSWER

        messages = build_messages(context, question)
        logger.info(f"🤖 Generating answer with {len(messages)} messages...")
        try:
            async with asyncio.timeout(self.timeout):
                answer = await self.llm_service.generate_response(messages)
        except TimeoutError as e:
            raise UpstreamError(
                "Failed to generate answer", details=f"Timed out after {self.timeout}s"
            ) from e
        except Exception as e:
            raise UpstreamError("Failed to generate answer", details=str(e)) from e

        return answer or EMPTY_ANSWER
