"""LLM service abstraction layer for pdfqa.

This package provides a unified interface for multiple LLM providers:
- OllamaService: Local LLM via Ollama
- GeminiService: Google Gemini API

Every service implements the LLMService protocol, which covers both
embedding generation and chat completion.

Usage:
    from pdfqa.llm import get_llm_service, LLMService

    # Create service from environment config
    service = get_llm_service()

    # Or with explicit config
    service = get_llm_service({"service": "gemini", "model": "gemini-2.5-flash"})
"""

from pdfqa.llm.base import LLMService
from pdfqa.llm.factory import get_llm_service
from pdfqa.llm.gemini import GeminiService
from pdfqa.llm.ollama import OllamaService

__all__ = [
    "LLMService",
    "OllamaService",
    "GeminiService",
    "get_llm_service",
]
