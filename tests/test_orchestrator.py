from hashlib import sha256

import numpy as np

from tentacle.domain.document import Paragraph, StructuredDocument, text
from tentacle.domain.metadata import FrontmatterMetadata
from tentacle.domain.records import DocumentEmbeddingRecord, DocumentListRecord, StoredDocument
from tentacle.index_store.local import LocalIndexStore
from tentacle.ingestion.orchestrator import (
    DocumentIndexer,
    IndexingResult,
    compute_chunk_content_hash,
    compute_document_content_hash,
)
from tests.fakes import FakeEmbedder


def make_document(
    document_id: str, title: str, *paragraphs: str, updated_at: str
) -> StoredDocument:
    return StoredDocument(
        metadata=FrontmatterMetadata(
            id=document_id, created_at="2025-01-01T00:00:00.000Z", updated_at=updated_at
        ),
        title=title,
        body=StructuredDocument(
            content=[Paragraph(content=[text(paragraph)]) for paragraph in paragraphs]
        ),
    )


def test_compute_document_content_hash() -> None:
    expected = sha256("Title\n\nbody\0model-a".encode("utf-8")).hexdigest()

    assert compute_document_content_hash("Title\n\nbody", "model-a") == expected
    assert compute_document_content_hash("Title\n\nbody", "model-b") != expected


def test_compute_chunk_content_hash() -> None:
    expected = sha256("chunks\0one\0two\0model-a".encode("utf-8")).hexdigest()

    assert compute_chunk_content_hash(["one", "two"], "model-a") == expected
    assert compute_chunk_content_hash(["one\0two"], "model-a") == expected
    assert compute_chunk_content_hash(["two", "one"], "model-a") != expected


def test_build_list_record(sample_document: StoredDocument) -> None:
    record = DocumentIndexer.build_list_record(sample_document)

    assert record == DocumentListRecord(
        id="doc-1",
        title="Weekly review",
        body="Shipped the importer . Next: write the search docs.",
        tags=["work"],
        banner_image_url=None,
        created_at="2025-01-01T00:00:00.000Z",
        updated_at="2025-01-02T00:00:00.000Z",
    )


def test_build_chunks_uses_top_level_blocks(
    indexer: DocumentIndexer, sample_document: StoredDocument
) -> None:
    chunks = indexer.build_chunks(sample_document)

    assert [chunk.text for chunk in chunks] == [
        "Weekly review\n\nShipped the importer .\n\nNext: write the search docs."
    ]


def test_build_chunk_embeddings_share_one_content_hash(
    fake_embedder: FakeEmbedder, index_store: LocalIndexStore
) -> None:
    indexer = DocumentIndexer(
        embedder=fake_embedder,
        index_store=index_store,
        chunk_target_chars=40,
        chunk_overlap_chars=0,
    )
    document = make_document(
        "doc", "T", "a" * 30, "b" * 30, "c" * 30, updated_at="2025-01-03T00:00:00.000Z"
    )

    records = indexer.build_chunk_embeddings(document)

    assert [record.chunk_index for record in records] == [0, 1, 2]
    assert [record.key for record in records] == ["doc_0", "doc_1", "doc_2"]
    assert len({record.content_hash for record in records}) == 1
    assert records[0].content_hash == compute_chunk_content_hash(
        [record.chunk_text for record in records], "fake-embedder"
    )
    assert all(record.updated_at == "2025-01-03T00:00:00.000Z" for record in records)
    assert all(record.vector.shape == (8,) for record in records)


def test_sync_embeddings_skips_unchanged_document_embedding(
    indexer: DocumentIndexer,
    index_store: LocalIndexStore,
    fake_embedder: FakeEmbedder,
    sample_document: StoredDocument,
) -> None:
    indexer.sync_embeddings(sample_document)
    first = index_store.get_document_embedding("doc-1")
    calls_after_first_sync = len(fake_embedder.calls)

    indexer.sync_embeddings(sample_document)

    assert index_store.get_document_embedding("doc-1") is first
    # Only the single chunk is embedded again.
    assert len(fake_embedder.calls) == calls_after_first_sync + 1
    assert len(index_store.get_chunk_embeddings("doc-1")) == 1


def test_sync_embeddings_recomputes_when_model_changes(
    indexer: DocumentIndexer, index_store: LocalIndexStore, sample_document: StoredDocument
) -> None:
    source_hash = compute_document_content_hash(
        "Weekly review\n\nShipped the importer . Next: write the search docs.", "fake-embedder"
    )
    index_store.upsert_document_embedding(
        DocumentEmbeddingRecord(
            document_id="doc-1",
            content_hash=source_hash,
            model="older-model",
            vector=np.zeros(8, dtype=np.float32),
            updated_at="2024-01-01T00:00:00.000Z",
        )
    )

    indexer.sync_embeddings(sample_document)

    record = index_store.get_document_embedding("doc-1")
    assert record is not None
    assert record.model == "fake-embedder"
    assert record.content_hash == source_hash
    assert record.updated_at == "2025-01-02T00:00:00.000Z"


def test_sync_embeddings_replaces_stale_chunks(
    fake_embedder: FakeEmbedder, index_store: LocalIndexStore
) -> None:
    indexer = DocumentIndexer(
        embedder=fake_embedder,
        index_store=index_store,
        chunk_target_chars=40,
        chunk_overlap_chars=0,
    )
    long_version = make_document(
        "doc", "T", "a" * 30, "b" * 30, "c" * 30, updated_at="2025-01-02T00:00:00.000Z"
    )
    short_version = make_document("doc", "T", "short", updated_at="2025-01-03T00:00:00.000Z")

    indexer.sync_embeddings(long_version)
    indexer.sync_embeddings(short_version)

    chunks = index_store.get_chunk_embeddings("doc")
    assert [chunk.chunk_text for chunk in chunks] == ["T\n\nshort"]


def test_remove_document(
    indexer: DocumentIndexer, index_store: LocalIndexStore, sample_document: StoredDocument
) -> None:
    indexer.index_document(sample_document)

    indexer.remove_document("doc-1")

    assert index_store.get_document("doc-1") is None
    assert index_store.get_document_embedding("doc-1") is None
    assert index_store.get_chunk_embeddings("doc-1") == []


class PickyEmbedder(FakeEmbedder):
    """Refuses to embed any text mentioning ``poison``."""

    def embed(self, text: str) -> np.ndarray:
        if "poison" in text:
            raise ValueError("refused")
        return super().embed(text)


def test_sync_embeddings_batch_counts_failures(index_store: LocalIndexStore) -> None:
    indexer = DocumentIndexer(embedder=PickyEmbedder(), index_store=index_store)
    documents = [
        make_document("good-1", "Fine", "text", updated_at="2025-01-02T00:00:00.000Z"),
        make_document("bad", "Contains poison", updated_at="2025-01-02T00:00:00.000Z"),
        make_document("good-2", "Also fine", updated_at="2025-01-02T00:00:00.000Z"),
    ]

    result = indexer.sync_embeddings_batch(documents)

    assert result == IndexingResult(synced=2, failed=1)
    assert index_store.get_document_embedding("bad") is None
    assert index_store.get_document_embedding("good-2") is not None


def test_reindex_replaces_records_and_drops_stale_documents(
    indexer: DocumentIndexer, index_store: LocalIndexStore
) -> None:
    stale = make_document("stale", "Gone", "old", updated_at="2025-01-01T00:00:00.000Z")
    indexer.index_document(stale)
    documents = [
        make_document("older", "Older", "x", updated_at="2025-01-02T00:00:00.000Z"),
        make_document("newer", "Newer", "y", updated_at="2025-01-05T00:00:00.000Z"),
    ]

    result = indexer.reindex(documents)

    assert result == IndexingResult(synced=2, failed=0)
    assert [record.id for record in index_store.list_documents()] == ["newer", "older"]
    assert index_store.get_document_embedding("stale") is None
    assert index_store.get_chunk_embeddings("stale") == []
    assert index_store.get_document_embedding("newer") is not None


def test_reindex_with_no_documents_empties_index(
    indexer: DocumentIndexer,
    index_store: LocalIndexStore,
    sample_document: StoredDocument,
) -> None:
    indexer.index_document(sample_document)

    result = indexer.reindex([])

    assert result == IndexingResult()
    assert index_store.list_documents() == []
    assert index_store.get_document_embedding("doc-1") is None
