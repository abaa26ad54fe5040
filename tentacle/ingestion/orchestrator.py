"""Orchestration of document indexing: list records, chunks and embeddings."""

import logging
from hashlib import sha256
from typing import Iterable

from pydantic import BaseModel

from tentacle.domain.records import (
    ChunkEmbeddingRecord,
    DocumentChunk,
    DocumentEmbeddingRecord,
    DocumentListRecord,
    StoredDocument,
)
from tentacle.embedders.base import Embedder
from tentacle.index_store.base import IndexStore

from .text_chunker import DocumentChunker
from .text_extractor import build_embedding_source_text, extract_block_texts, extract_plain_text

logger = logging.getLogger(__name__)


class IndexingResult(BaseModel):
    synced: int = 0
    failed: int = 0


def compute_document_content_hash(source_text: str, model: str) -> str:
    return sha256(f"{source_text}\0{model}".encode("utf-8")).hexdigest()


def compute_chunk_content_hash(chunk_texts: list[str], model: str) -> str:
    joined = "\0".join(chunk_texts)
    return sha256(f"chunks\0{joined}\0{model}".encode("utf-8")).hexdigest()


class DocumentIndexer:
    """Turns stored documents into the records kept by the index store."""

    def __init__(
        self,
        *,
        embedder: Embedder,
        index_store: IndexStore,
        chunk_target_chars: int = 800,
        chunk_overlap_chars: int = 200,
    ):
        """Initialize the indexer with required services.

        Args:
            embedder: Embedder used for document and chunk vectors
            index_store: Store receiving list records and embeddings
            chunk_target_chars: Target chunk size in characters
            chunk_overlap_chars: Characters repeated between consecutive chunks
        """
        self.embedder = embedder
        self.index_store = index_store
        self.chunker = DocumentChunker(
            target_chars=chunk_target_chars, overlap_chars=chunk_overlap_chars
        )

    @staticmethod
    def build_list_record(document: StoredDocument) -> DocumentListRecord:
        metadata = document.metadata
        return DocumentListRecord(
            id=metadata.id,
            title=document.title,
            body=extract_plain_text(document.body),
            tags=metadata.tags,
            banner_image_url=metadata.banner_image_url,
            created_at=metadata.created_at,
            updated_at=metadata.updated_at,
        )

    def build_chunks(self, document: StoredDocument) -> list[DocumentChunk]:
        """Chunk a document's text; top-level blocks become paragraphs."""
        body = "\n\n".join(extract_block_texts(document.body))
        return self.chunker.chunk(document.title, body)

    def build_chunk_embeddings(self, document: StoredDocument) -> list[ChunkEmbeddingRecord]:
        chunks = self.build_chunks(document)
        model = self.embedder.model_id
        content_hash = compute_chunk_content_hash([chunk.text for chunk in chunks], model)
        return [
            ChunkEmbeddingRecord(
                document_id=document.id,
                chunk_index=chunk.index,
                chunk_text=chunk.text,
                content_hash=content_hash,
                model=model,
                vector=self.embedder.embed(chunk.text),
                updated_at=document.metadata.updated_at,
            )
            for chunk in chunks
        ]

    def sync_embeddings(self, document: StoredDocument) -> None:
        """Refresh the embeddings of one document.

        The whole-document embedding is only recomputed when its content hash changed;
        chunk embeddings are always replaced.
        """
        model = self.embedder.model_id
        source_text = build_embedding_source_text(document.title, document.body)
        content_hash = compute_document_content_hash(source_text, model)

        existing = self.index_store.get_document_embedding(document.id)
        if existing and existing.model == model and existing.content_hash == content_hash:
            logger.debug(f"Document embedding of {document.id} is current")
        else:
            self.index_store.upsert_document_embedding(
                DocumentEmbeddingRecord(
                    document_id=document.id,
                    content_hash=content_hash,
                    model=model,
                    vector=self.embedder.embed(source_text),
                    updated_at=document.metadata.updated_at,
                )
            )

        self.index_store.replace_chunk_embeddings(
            document.id, self.build_chunk_embeddings(document)
        )

    def index_document(self, document: StoredDocument) -> None:
        self.index_store.upsert_document(self.build_list_record(document))
        self.sync_embeddings(document)

    def remove_document(self, document_id: str) -> None:
        self.index_store.delete_document(document_id)

    def sync_embeddings_batch(self, documents: Iterable[StoredDocument]) -> IndexingResult:
        """Sync embeddings of many documents; a failing document does not stop the batch."""
        result = IndexingResult()
        for document in documents:
            try:
                self.sync_embeddings(document)
            except ValueError as e:
                result.failed += 1
                logger.error(f"Failed to sync embeddings for {document.id!r}: {e}")
            else:
                result.synced += 1
        return result

    def reindex(self, documents: list[StoredDocument]) -> IndexingResult:
        """Rebuild the index from the full set of stored documents.

        Args:
            documents: Every document currently on disk

        Returns:
            Counts of documents whose embeddings were synced or failed
        """
        current_ids = {document.id for document in documents}
        stale_ids = {record.id for record in self.index_store.list_documents()} - current_ids
        for document_id in stale_ids:
            self.index_store.delete_embeddings(document_id)

        records = sorted(
            (self.build_list_record(document) for document in documents),
            key=lambda record: record.updated_at,
            reverse=True,
        )
        self.index_store.replace_documents(records)

        result = self.sync_embeddings_batch(documents)
        logger.info("Reindex complete:")
        logger.info(f"  - Documents: {len(documents)}")
        logger.info(f"  - Removed: {len(stale_ids)}")
        logger.info(f"  - Synced: {result.synced}")
        logger.info(f"  - Failed: {result.failed}")
        return result
