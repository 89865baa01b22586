"""Command-line interface for pdfqa using Click."""

import asyncio
import logging
import os
from pathlib import Path

import click
from dotenv import load_dotenv

from pdfqa.client.cli_helpers import (
    ensure_database_exists,
    format_citation,
    format_document,
    get_database_info,
)
from pdfqa.constants import get_embedding_model
from pdfqa.errors import PdfQAError
from pdfqa.service.database import database_exists, delete_database
from pdfqa.service.pipeline import create_pipeline

# Load environment variables
load_dotenv()
logging.basicConfig(level=getattr(logging, os.getenv("LOG_LEVEL", "INFO")))


@click.command()
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
)
@click.option(
    "--create-database",
    "create_database_flag",
    is_flag=True,
    default=False,
    help="Create the RavenDB database if it doesn't exist",
)
def ingest(directory: Path, create_database_flag: bool) -> None:
    """Upload every PDF file in DIRECTORY to the pdfqa knowledge base.

    Example:
        pdfqa-ingest documents/
        pdfqa-ingest documents/ --create-database
    """
    ensure_database_exists(create_if_missing=create_database_flag, directory=str(directory))

    pdf_files = sorted(directory.glob("*.pdf"))
    if not pdf_files:
        click.echo(f"No PDF files found in '{directory}'")
        return

    click.echo(f"Found {len(pdf_files)} PDF file(s)")
    click.echo(f"Using embedding model: {get_embedding_model()}\n")

    pipeline = create_pipeline()
    uploaded = 0
    for pdf_path in pdf_files:
        try:
            result = asyncio.run(
                pipeline.upload(pdf_path.name, pdf_path.read_bytes(), "application/pdf")
            )
        except PdfQAError as e:
            detail = f" ({e.details})" if e.details else ""
            click.echo(f"  ✗ {pdf_path.name}: {e.message}{detail}", err=True)
            continue
        uploaded += 1
        click.echo(
            f"  ✓ {pdf_path.name}: {result.chunks} chunks "
            f"(document id: {result.document.Id})"
        )

    click.echo(f"\nIngestion complete! Uploaded {uploaded} of {len(pdf_files)} file(s).")


@click.command()
@click.argument("question", type=str)
@click.option(
    "--document-id",
    type=str,
    default=None,
    help="Only search the document with this id (default: all documents)",
)
def ask(question: str, document_id: str | None) -> None:
    """Answer QUESTION from the uploaded documents.

    Example:
        pdfqa-ask "What is the main conclusion?"
        pdfqa-ask "Who are the authors?" --document-id 0c6f...
    """
    ensure_database_exists()

    click.echo(f"🔍 Question: '{question}'\n")
    try:
        result = asyncio.run(create_pipeline().ask(question, document_id))
    except PdfQAError as e:
        detail = f" ({e.details})" if e.details else ""
        click.echo(f"✗ Error: {e.message}{detail}", err=True)
        raise click.Abort()

    click.echo(result.answer)
    if result.citations:
        click.echo(f"\n📎 Citations ({len(result.citations)}):\n")
        for i, citation in enumerate(result.citations, 1):
            click.echo(format_citation(i, citation))


@click.command()
def documents() -> None:
    """List uploaded documents.

    Example:
        pdfqa-documents
    """
    ensure_database_exists()
    try:
        docs = create_pipeline().list_documents()
    except PdfQAError as e:
        click.echo(f"✗ Error: {e.message}", err=True)
        raise click.Abort()

    if not docs:
        click.echo("No documents uploaded yet.")
        return

    click.echo(f"📊 {len(docs)} document(s):\n")
    for document in docs:
        click.echo(format_document(document))


@click.command()
@click.option("--yes", "-y", is_flag=True, default=False, help="Skip confirmation prompt")
def delete_db(yes: bool) -> None:
    """Drop the RavenDB database with every uploaded document in it.

    The deletion cannot be undone. Without --yes the command shows what is
    about to be lost and asks first.

    Example:
        pdfqa-delete-db
        pdfqa-delete-db --yes
    """
    url, db_name, doc_count = get_database_info()

    if not database_exists():
        click.echo(f"✓ Nothing to delete: database '{db_name}' does not exist at {url}")
        return

    if not yes:
        stored = f"{doc_count} document(s)" if doc_count is not None else "an unknown number of documents"
        click.echo(f"⚠️  Database '{db_name}' at {url} holds {stored}.")
        click.echo("Their chunks, embeddings and the vector index go with it.\n")
        if not click.confirm(f"Delete '{db_name}'?", default=False):
            click.echo("Deletion cancelled.")
            return

    click.echo(f"🗑️  Deleting database '{db_name}'...")
    try:
        delete_database()
    except Exception as e:
        click.echo(f"✗ Error deleting database: {e}", err=True)
        raise click.Abort()

    click.echo(f"✓ Database '{db_name}' successfully deleted!")
    click.echo("Recreate it with: pdfqa-ingest <directory> --create-database")


if __name__ == "__main__":
    ingest()
