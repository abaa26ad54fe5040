import json
from pathlib import Path

from loguru import logger

from tentacle.domain.records import (
    ChunkEmbeddingRecord,
    DocumentEmbeddingRecord,
    DocumentListRecord,
)
from tentacle.index_store.base import IndexStore


class LocalIndexStore(IndexStore):
    """Index store that keeps document records and embeddings in a JSON file.

    It only persists what the indexer hands it; ranking is left to a search backend.
    """

    def __init__(self, filepath: str | Path | None = None) -> None:
        """Initialize LocalIndexStore.

        Args:
            filepath: Path to the index file. If provided and exists, it is loaded.
                     If provided and doesn't exist, save() will create it.
                     If not provided, the index lives in memory only.
        """
        self._filepath = str(filepath) if filepath else None
        self._documents: dict[str, DocumentListRecord] = {}
        self._document_embeddings: dict[str, DocumentEmbeddingRecord] = {}
        self._chunk_embeddings: dict[str, list[ChunkEmbeddingRecord]] = {}

        if self._filepath and Path(self._filepath).exists():
            with open(self._filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._documents = {
                document_id: DocumentListRecord(**record)
                for document_id, record in data.get("documents", {}).items()
            }
            self._document_embeddings = {
                document_id: DocumentEmbeddingRecord(**record)
                for document_id, record in data.get("document_embeddings", {}).items()
            }
            self._chunk_embeddings = {
                document_id: [ChunkEmbeddingRecord(**record) for record in records]
                for document_id, records in data.get("chunk_embeddings", {}).items()
            }
            logger.debug(f"Loaded {len(self._documents)} documents from {self._filepath}")

    @classmethod
    def from_data(
        cls,
        documents: dict[str, DocumentListRecord] | None = None,
        document_embeddings: dict[str, DocumentEmbeddingRecord] | None = None,
        chunk_embeddings: dict[str, list[ChunkEmbeddingRecord]] | None = None,
    ) -> "LocalIndexStore":
        """Create an in-memory LocalIndexStore from provided data (useful for testing)."""
        instance = cls(filepath=None)
        instance._documents = documents or {}
        instance._document_embeddings = document_embeddings or {}
        instance._chunk_embeddings = chunk_embeddings or {}
        return instance

    def list_documents(self) -> list[DocumentListRecord]:
        return sorted(
            self._documents.values(), key=lambda record: record.updated_at, reverse=True
        )

    def get_document(self, document_id: str) -> DocumentListRecord | None:
        return self._documents.get(document_id)

    def upsert_document(self, record: DocumentListRecord) -> None:
        self._documents[record.id] = record

    def replace_documents(self, records: list[DocumentListRecord]) -> None:
        self._documents = {record.id: record for record in records}

    def delete_document(self, document_id: str) -> None:
        self._documents.pop(document_id, None)
        self.delete_embeddings(document_id)

    def get_document_embedding(self, document_id: str) -> DocumentEmbeddingRecord | None:
        return self._document_embeddings.get(document_id)

    def upsert_document_embedding(self, record: DocumentEmbeddingRecord) -> None:
        self._document_embeddings[record.document_id] = record

    def get_chunk_embeddings(self, document_id: str) -> list[ChunkEmbeddingRecord]:
        return sorted(
            self._chunk_embeddings.get(document_id, []), key=lambda record: record.chunk_index
        )

    def replace_chunk_embeddings(
        self, document_id: str, records: list[ChunkEmbeddingRecord]
    ) -> None:
        if records:
            self._chunk_embeddings[document_id] = list(records)
        else:
            self._chunk_embeddings.pop(document_id, None)

    def delete_embeddings(self, document_id: str) -> None:
        self._document_embeddings.pop(document_id, None)
        self._chunk_embeddings.pop(document_id, None)

    def save(self, filepath: str | None = None) -> None:
        """Save the index to a JSON file.

        Args:
            filepath: Path to save to. If not provided, uses the filepath from initialization.
        """
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )

        data = {
            "documents": {
                document_id: record.model_dump()
                for document_id, record in self._documents.items()
            },
            "document_embeddings": {
                document_id: record.model_dump()
                for document_id, record in self._document_embeddings.items()
            },
            "chunk_embeddings": {
                document_id: [record.model_dump() for record in records]
                for document_id, records in self._chunk_embeddings.items()
            },
        }
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        with open(save_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        logger.info(f"Saved index with {len(self._documents)} documents to {save_path}")
