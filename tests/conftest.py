"""Shared pytest fixtures for all tests.

FIXTURE PHILOSOPHY:
- Put INFRASTRUCTURE here (mock_db, in-memory Firestore, identifier stubs)
- Keep TEST DATA in test files (courses, lessons, attempts, etc.)

This keeps tests self-documenting and easy to read.
"""

from pathlib import Path
import sys

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tests.mocks.firestore import InMemoryFirestore  # noqa: E402
from tests.mocks.identifiers import SequentialIdentifierGenerator  # noqa: E402


# Configure anyio to only use asyncio (not trio)
@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def memory_db():
    """Empty in-memory Firestore."""
    return InMemoryFirestore()


@pytest.fixture
def identifier_generator():
    """Deterministic certificate ids, verification codes and clock."""
    return SequentialIdentifierGenerator()
