from typing import Protocol

from tentacle.domain.records import (
    ChunkEmbeddingRecord,
    DocumentEmbeddingRecord,
    DocumentListRecord,
)


class IndexStore(Protocol):
    def list_documents(self) -> list[DocumentListRecord]:
        """Get all document records, most recently updated first."""
        ...

    def get_document(self, document_id: str) -> DocumentListRecord | None:
        """Get a document record by its ID."""
        ...

    def upsert_document(self, record: DocumentListRecord) -> None:
        """Add a new document record or update an existing one."""
        ...

    def replace_documents(self, records: list[DocumentListRecord]) -> None:
        """Replace every document record with the given ones."""
        ...

    def delete_document(self, document_id: str) -> None:
        """Delete a document record together with its embeddings."""
        ...

    def get_document_embedding(self, document_id: str) -> DocumentEmbeddingRecord | None:
        """Get the whole-document embedding of a document."""
        ...

    def upsert_document_embedding(self, record: DocumentEmbeddingRecord) -> None:
        """Add or replace the whole-document embedding of a document."""
        ...

    def get_chunk_embeddings(self, document_id: str) -> list[ChunkEmbeddingRecord]:
        """Get the chunk embeddings of a document ordered by chunk index."""
        ...

    def replace_chunk_embeddings(
        self, document_id: str, records: list[ChunkEmbeddingRecord]
    ) -> None:
        """Replace all chunk embeddings of a document."""
        ...

    def delete_embeddings(self, document_id: str) -> None:
        """Delete the document and chunk embeddings of a document."""
        ...

    def save(self, filepath: str | None = None) -> None:
        """Save the index to disk."""
        ...
