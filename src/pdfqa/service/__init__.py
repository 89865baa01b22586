"""Retrieval, generation and storage services for pdfqa."""
