from fastapi import APIRouter, HTTPException
from loguru import logger

from tentacle.codec.tree_json import document_to_json
from tentacle.domain.records import (
    DocumentCreate,
    DocumentListRecord,
    DocumentUpdate,
    RecoveryResult,
    StoredDocument,
    TrashedDocument,
)
from tentacle.domain.search import ProcessedQuery, SearchHit
from tentacle.ingestion.orchestrator import DocumentIndexer
from tentacle.search.query_preprocessor import preprocess_query
from tentacle.search.service import HybridSearchService
from tentacle.storage.repository import DocumentRepository


def document_payload(document: StoredDocument) -> dict:
    """Document as the editor consumes it: metadata fields plus the body as editor JSON."""
    metadata = document.metadata
    return {
        "id": metadata.id,
        "title": document.title,
        "body": document_to_json(document.body),
        "tags": metadata.tags,
        "banner_image_url": metadata.banner_image_url,
        "created_at": metadata.created_at,
        "updated_at": metadata.updated_at,
    }


def _create_list_documents_endpoint(repository: DocumentRepository):
    """Create the document listing endpoint handler."""

    async def list_documents() -> list[DocumentListRecord]:
        try:
            return [
                DocumentIndexer.build_list_record(document)
                for document in repository.list_documents()
            ]
        except Exception as e:
            logger.error(f"Error listing documents: {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e

    return list_documents


def _create_create_document_endpoint(repository: DocumentRepository):
    """Create the document creation endpoint handler."""

    async def create_document(payload: DocumentCreate | None = None) -> dict:
        try:
            return document_payload(repository.create(payload))
        except Exception as e:
            logger.error(f"Error creating document: {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e

    return create_document


def _create_get_document_endpoint(repository: DocumentRepository):
    """Create the single-document endpoint handler."""

    async def get_document(document_id: str) -> dict:
        try:
            return document_payload(repository.get(document_id))
        except KeyError as err:
            logger.warning(f"Document not found: {document_id}")
            raise HTTPException(status_code=404, detail="Document not found") from err
        except Exception as e:
            logger.error(f"Error reading document {document_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e

    return get_document


def _create_update_document_endpoint(repository: DocumentRepository):
    """Create the document update endpoint handler."""

    async def update_document(document_id: str, changes: DocumentUpdate) -> dict:
        if changes.is_empty():
            raise HTTPException(status_code=400, detail="No fields to update")

        try:
            return document_payload(repository.update(document_id, changes))
        except KeyError as err:
            logger.warning(f"Document not found: {document_id}")
            raise HTTPException(status_code=404, detail="Document not found") from err
        except Exception as e:
            logger.error(f"Error updating document {document_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e

    return update_document


def _create_trash_document_endpoint(repository: DocumentRepository):
    """Create the document trash endpoint handler."""

    async def trash_document(document_id: str) -> dict:
        try:
            repository.trash(document_id)
        except KeyError as err:
            logger.warning(f"Document not found: {document_id}")
            raise HTTPException(status_code=404, detail="Document not found") from err
        except Exception as e:
            logger.error(f"Error trashing document {document_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e
        return {"id": document_id, "status": "trashed"}

    return trash_document


def _create_list_trash_endpoint(repository: DocumentRepository):
    """Create the trash listing endpoint handler."""

    async def list_trash() -> list[TrashedDocument]:
        try:
            return repository.list_trash()
        except Exception as e:
            logger.error(f"Error listing trash: {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e

    return list_trash


def _create_recover_document_endpoint(repository: DocumentRepository):
    """Create the trash recovery endpoint handler."""

    async def recover_document(trash_name: str) -> RecoveryResult:
        try:
            return repository.recover(trash_name)
        except KeyError as err:
            logger.warning(f"Trash item not found: {trash_name}")
            raise HTTPException(status_code=404, detail="Trash item not found") from err
        except Exception as e:
            logger.error(f"Error recovering {trash_name}: {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e

    return recover_document


def _create_search_endpoint(search_service: HybridSearchService):
    """Create the hybrid search endpoint handler."""

    async def search(
        q: str,
        limit: int | None = None,
        min_score: float | None = None,
        exclude: str | None = None,
    ) -> list[SearchHit]:
        try:
            return search_service.search(
                q, limit=limit, min_score=min_score, exclude_document_id=exclude
            )
        except Exception as e:
            logger.error(f"Error searching for '{q}': {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e

    return search


def get_endpoints_router(
    *,
    repository: DocumentRepository,
    search_service: HybridSearchService | None = None,
) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @router.get("/api/search/prepare")
    async def prepare_query(q: str = "") -> ProcessedQuery:
        return preprocess_query(q)

    router.get("/api/documents")(_create_list_documents_endpoint(repository))
    router.post("/api/documents", status_code=201)(_create_create_document_endpoint(repository))
    router.get("/api/documents/{document_id}")(_create_get_document_endpoint(repository))
    router.patch("/api/documents/{document_id}")(_create_update_document_endpoint(repository))
    router.delete("/api/documents/{document_id}")(_create_trash_document_endpoint(repository))
    router.get("/api/trash")(_create_list_trash_endpoint(repository))
    router.post("/api/trash/{trash_name}/recover")(_create_recover_document_endpoint(repository))

    if search_service is not None and search_service.backend is not None:
        router.get("/api/search")(_create_search_endpoint(search_service))

    return router
