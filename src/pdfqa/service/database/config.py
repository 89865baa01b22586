"""Configuration for the RavenDB connection."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from pdfqa.constants import DEFAULT_RAVENDB_DATABASE, DEFAULT_RAVENDB_URL

# Load environment variables
load_dotenv()


@dataclass(frozen=True)
class RavenDBConfig:
    """Server URL and database name of the chunk store.

    Attributes:
        url: RavenDB server URL (RAVENDB_URL, default http://localhost:8080)
        database: Database name (RAVENDB_DATABASE, default pdfqa)
    """

    url: str = DEFAULT_RAVENDB_URL
    database: str = DEFAULT_RAVENDB_DATABASE

    @classmethod
    def from_env(cls, url: str | None = None, database: str | None = None) -> "RavenDBConfig":
        """Build a config from the environment; explicit arguments win."""
        return cls(
            url=url or os.getenv("RAVENDB_URL", DEFAULT_RAVENDB_URL),
            database=database or os.getenv("RAVENDB_DATABASE", DEFAULT_RAVENDB_DATABASE),
        )
