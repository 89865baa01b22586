"""Client-side surfaces for pdfqa: Flask app and CLI."""
