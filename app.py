import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from tentacle.api import create_app
from tentacle.config import settings
from tentacle.embedders.hash_embedder import HashEmbedder
from tentacle.index_store.local import LocalIndexStore
from tentacle.ingestion.orchestrator import DocumentIndexer
from tentacle.search.service import HybridSearchService
from tentacle.storage.filesystem import LocalFileSystem
from tentacle.storage.repository import DocumentRepository

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

logger.info(f"Serving documents from {settings.documents_folder}")
embedder = HashEmbedder()
index_store = LocalIndexStore(filepath=settings.local_index_path)
indexer = DocumentIndexer(
    embedder=embedder,
    index_store=index_store,
    chunk_target_chars=settings.chunk_target_chars,
    chunk_overlap_chars=settings.chunk_overlap_chars,
)
repository = DocumentRepository(
    filesystem=LocalFileSystem(),
    folder=settings.documents_folder,
    trash_folder_name=settings.trash_folder_name,
    indexer=indexer,
    max_tree_depth=settings.max_tree_depth,
    max_tree_nodes=settings.max_tree_nodes,
)
search_service = HybridSearchService(
    embedder=embedder,
    default_limit=settings.search_limit,
    default_min_score=settings.search_min_score,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    index_store.save()


app = create_app(repository=repository, search_service=search_service, lifespan=lifespan)
