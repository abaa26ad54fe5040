from itertools import count
from pathlib import Path
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from tentacle.api import create_app
from tentacle.domain.document import Paragraph, StructuredDocument, text
from tentacle.domain.metadata import FrontmatterMetadata
from tentacle.domain.records import StoredDocument
from tentacle.domain.search import SearchHit
from tentacle.embedders.base import Embedder
from tentacle.index_store.local import LocalIndexStore
from tentacle.ingestion.orchestrator import DocumentIndexer
from tentacle.search.service import HybridSearchService
from tentacle.storage.repository import DocumentRepository
from tests.fakes import FakeEmbedder, FakeFileSystem, FakeSearchBackend

DOCUMENTS_FOLDER = "/notes"


@pytest.fixture
def clock() -> Callable[[], str]:
    """Clock that moves one second forward on every call."""
    ticks = count()
    return lambda: f"2025-01-01T00:00:{next(ticks):02d}.000Z"


@pytest.fixture
def sample_document() -> StoredDocument:
    return StoredDocument(
        metadata=FrontmatterMetadata(
            id="doc-1",
            created_at="2025-01-01T00:00:00.000Z",
            updated_at="2025-01-02T00:00:00.000Z",
            tags=["work"],
        ),
        title="Weekly review",
        body=StructuredDocument(
            content=[
                Paragraph(content=[text("Shipped the "), text("importer", "bold"), text(".")]),
                Paragraph(content=[text("Next: write the search docs.")]),
            ]
        ),
    )


@pytest.fixture
def fake_embedder() -> Embedder:
    return FakeEmbedder()


@pytest.fixture
def fake_search_backend() -> FakeSearchBackend:
    return FakeSearchBackend(
        hits=[
            SearchHit(document_id="doc-b", score=0.4),
            SearchHit(document_id="doc-a", score=0.9),
            SearchHit(document_id="doc-c", score=0.4),
        ]
    )


@pytest.fixture
def index_store() -> LocalIndexStore:
    return LocalIndexStore.from_data()


@pytest.fixture
def indexer(fake_embedder: Embedder, index_store: LocalIndexStore) -> DocumentIndexer:
    return DocumentIndexer(embedder=fake_embedder, index_store=index_store)


@pytest.fixture
def fake_filesystem() -> FakeFileSystem:
    return FakeFileSystem()


@pytest.fixture
def repository(
    fake_filesystem: FakeFileSystem, indexer: DocumentIndexer, clock: Callable[[], str]
) -> DocumentRepository:
    return DocumentRepository(
        filesystem=fake_filesystem, folder=DOCUMENTS_FOLDER, indexer=indexer, clock=clock
    )


@pytest.fixture
def search_service(
    fake_embedder: Embedder, fake_search_backend: FakeSearchBackend
) -> HybridSearchService:
    return HybridSearchService(embedder=fake_embedder, backend=fake_search_backend)


@pytest.fixture
def test_client(
    repository: DocumentRepository, search_service: HybridSearchService
) -> TestClient:
    """Create test client with fake implementations."""
    app = create_app(repository=repository, search_service=search_service)
    return TestClient(app)


@pytest.fixture
def documents_folder(tmp_path: Path) -> Path:
    """Empty documents folder on disk."""
    folder = tmp_path / "documents"
    folder.mkdir()
    return folder
