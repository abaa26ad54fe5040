"""CLI for rebuilding the local index (list records and embeddings) from a documents folder"""

import argparse
import logging
import sys

from loguru import logger

from tentacle.config import settings
from tentacle.embedders.hash_embedder import HashEmbedder
from tentacle.index_store.local import LocalIndexStore
from tentacle.ingestion.orchestrator import DocumentIndexer, IndexingResult
from tentacle.storage.filesystem import LocalFileSystem
from tentacle.storage.repository import DocumentRepository


def main(
    in_folder: str,
    local_outfile_index: str,
    chunk_target_chars: int,
    chunk_overlap_chars: int,
) -> IndexingResult:
    # Setup paths and services
    repository = DocumentRepository(
        filesystem=LocalFileSystem(),
        folder=in_folder,
        trash_folder_name=settings.trash_folder_name,
    )
    index_store = LocalIndexStore(filepath=local_outfile_index)
    indexer = DocumentIndexer(
        embedder=HashEmbedder(),
        index_store=index_store,
        chunk_target_chars=chunk_target_chars,
        chunk_overlap_chars=chunk_overlap_chars,
    )

    documents = repository.list_documents()
    logger.info(f"Found {len(documents)} documents in {in_folder}")
    result = indexer.reindex(documents)
    index_store.save()
    return result


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--in-folder",
        type=str,
        required=False,
        help="Folder containing document files",
        default=settings.documents_folder,
    )
    parser.add_argument(
        "--outfile-index",
        type=str,
        required=False,
        help="Local output index file",
        default=settings.local_index_path,
    )
    parser.add_argument(
        "--chunk-target-chars",
        type=int,
        required=False,
        help="Target chunk size in characters",
        default=settings.chunk_target_chars,
    )
    parser.add_argument(
        "--chunk-overlap-chars",
        type=int,
        required=False,
        help="Characters repeated between consecutive chunks",
        default=settings.chunk_overlap_chars,
    )

    args = parser.parse_args()

    logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])
    logging.basicConfig(level=settings.log_level)

    result = main(
        in_folder=args.in_folder,
        local_outfile_index=args.outfile_index,
        chunk_target_chars=args.chunk_target_chars,
        chunk_overlap_chars=args.chunk_overlap_chars,
    )
    sys.exit(1 if result.failed else 0)
