"""Global test fixtures."""

import os

import pytest

# Keep developer config files out of the test environment
os.environ.pop("PDS_CONFIG_FILE", None)

from pds.config import RepositoryConfig  # noqa: E402
from pds.infrastructure.memory.entity_store import InMemoryEntityStore  # noqa: E402

ARCHIVED = "http://dspace.org/state/archived"
WITHDRAWN = "http://dspace.org/state/withdrawn"
INPROGRESS = "http://dspace.org/state/inprogress"


def sword_statement(term: str | None) -> bytes:
    """Minimal SWORDv2 Atom statement declaring ``term`` as its state."""
    category = (
        f'<category scheme="http://purl.org/net/sword/terms/state" term="{term}" label="State"/>'
        if term
        else ""
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<feed xmlns="http://www.w3.org/2005/Atom">'
        "<id>http://repo.example.org/swordv2/statement/1</id>"
        "<title>Statement</title>"
        f"{category}"
        "</feed>"
    ).encode()


@pytest.fixture
def store() -> InMemoryEntityStore:
    return InMemoryEntityStore()


@pytest.fixture
def repository_config() -> RepositoryConfig:
    return RepositoryConfig(key="dspace")


@pytest.fixture
def make_statement():
    return sword_statement
