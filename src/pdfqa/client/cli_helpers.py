"""Shared plumbing for the pdfqa command-line tools."""

import click

from pdfqa.service.context import Citation
from pdfqa.service.database import (
    RavenDBConfig,
    count_documents,
    create_database,
    database_exists,
)
from pdfqa.service.database.models import Document


def _abort(*lines: str) -> None:
    for line in lines:
        click.echo(line, err=True)
    raise click.Abort()


def ensure_database_exists(
    create_if_missing: bool = False,
    directory: str | None = None,
) -> bool:
    """Make sure the configured database is there before a command touches it.

    With ``create_if_missing`` a missing database is created; otherwise the
    command aborts and suggests the ``--create-database`` invocation, naming
    ``directory`` when one was given.

    Raises:
        click.Abort: If the database is missing and was not created
    """
    if database_exists():
        return True

    if not create_if_missing:
        target = directory or "<directory>"
        _abort(
            "✗ Error: Database does not exist!",
            "\nCreate it while ingesting with:",
            f"  pdfqa-ingest {target} --create-database",
        )

    click.echo("Database does not exist. Creating database...")
    try:
        create_database()
    except Exception as e:
        _abort(
            f"✗ Failed to create database: {e}",
            "\nCheck that RavenDB is running and reachable.",
        )
    click.echo("✓ Database created successfully!")
    return True


def format_citation(index: int, citation: Citation) -> str:
    """Render a numbered citation as two lines plus a blank separator."""
    return f"{index}. [Page {citation.page}] (similarity: {citation.similarity:.4f})\n   {citation.text}\n"


def format_document(document: Document) -> str:
    return (
        f"{document.Id}  {document.filename}  "
        f"({document.total_pages} pages, {document.total_chunks} chunks)"
    )


def get_database_info() -> tuple[str, str, int | None]:
    """Return (url, database name, document count); the count is None when unavailable."""
    config = RavenDBConfig.from_env()
    try:
        doc_count = count_documents(config.url, config.database)
    except Exception:
        doc_count = None
    return config.url, config.database, doc_count
