"""Document files on disk: one Markdown file per document, retired into a trash folder."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from loguru import logger

from tentacle.codec.markdown import body_json_to_markdown, parse_markdown
from tentacle.codec.stored_file import normalize_title, read_markdown_file, write_markdown_file
from tentacle.codec.tree_json import DEFAULT_MAX_DEPTH, DEFAULT_MAX_NODES
from tentacle.domain.document import empty_document
from tentacle.domain.metadata import FrontmatterMetadata
from tentacle.domain.records import (
    DocumentCreate,
    DocumentUpdate,
    RecoveryResult,
    StoredDocument,
    TrashedDocument,
)
from tentacle.ingestion.orchestrator import DocumentIndexer
from tentacle.storage.filesystem import FileSystem
from tentacle.utils.time import now_iso, parse_iso

MARKDOWN_EXTENSION = ".md"


def _is_markdown_name(name: str) -> bool:
    return name.lower().endswith(MARKDOWN_EXTENSION) and len(name) > len(MARKDOWN_EXTENSION)


class DocumentNotFoundError(KeyError):
    def __init__(self, document_id: str):
        super().__init__(document_id)
        self.document_id = document_id

    def __str__(self) -> str:
        return f'Document "{self.document_id}" was not found.'


class TrashItemNotFoundError(KeyError):
    def __init__(self, trash_name: str):
        super().__init__(trash_name)
        self.trash_name = trash_name

    def __str__(self) -> str:
        return f'Trash item "{self.trash_name}" was not found.'


class DocumentRepository:
    """Creates, reads, updates, lists, trashes and recovers document files.

    When an indexer is given, every write is mirrored into the index. Index failures
    are logged and never fail the write itself.
    """

    def __init__(
        self,
        *,
        filesystem: FileSystem,
        folder: str | Path,
        trash_folder_name: str = ".trash",
        indexer: DocumentIndexer | None = None,
        max_tree_depth: int = DEFAULT_MAX_DEPTH,
        max_tree_nodes: int = DEFAULT_MAX_NODES,
        clock: Callable[[], str] = now_iso,
    ):
        self.filesystem = filesystem
        self.folder = Path(folder)
        self.trash_folder = self.folder / trash_folder_name
        self.indexer = indexer
        self.max_tree_depth = max_tree_depth
        self.max_tree_nodes = max_tree_nodes
        self.clock = clock

    def document_path(self, document_id: str) -> Path:
        return self.folder / f"{document_id}{MARKDOWN_EXTENSION}"

    def list_ids(self) -> list[str]:
        """Ids of the documents in the folder, taken from the ``.md`` file names."""
        if not self.filesystem.exists(self.folder):
            return []
        names = self.filesystem.list_dir(self.folder)
        ids = (
            name[: -len(MARKDOWN_EXTENSION)]
            for name in names
            if name.lower().endswith(MARKDOWN_EXTENSION)
        )
        return [document_id for document_id in ids if document_id]

    def get(self, document_id: str) -> StoredDocument:
        """Read a document.

        Raises:
            DocumentNotFoundError: If the document file does not exist
        """
        path = self.document_path(document_id)
        if not self.filesystem.exists(path):
            raise DocumentNotFoundError(document_id)
        text = self.filesystem.read_text(path)
        return read_markdown_file(text, fallback_id=document_id, now=self.clock())

    def list_documents(self) -> list[StoredDocument]:
        """Read every document, most recently updated first."""
        documents = [self.get(document_id) for document_id in self.list_ids()]
        return sorted(documents, key=lambda document: document.metadata.updated_at, reverse=True)

    def create(self, payload: DocumentCreate | None = None) -> StoredDocument:
        """Create a new document with a generated id and one empty paragraph."""
        payload = payload or DocumentCreate()
        self.filesystem.mkdir(self.folder)

        document = StoredDocument(
            metadata=FrontmatterMetadata.create(tags=payload.tags, now=self.clock()),
            title=normalize_title(payload.title),
            body=empty_document(),
        )
        self._write(document)
        logger.info(f"Created document {document.id}")
        self._index(document)
        return document

    def update(self, document_id: str, changes: DocumentUpdate) -> StoredDocument:
        """Apply ``changes`` to a stored document and save it.

        Raises:
            DocumentNotFoundError: If the document file does not exist
        """
        existing = self.get(document_id)
        fields = changes.model_fields_set

        metadata_changes = {}
        if "tags" in fields:
            metadata_changes["tags"] = changes.tags or []
        if "banner_image_url" in fields:
            metadata_changes["banner_image_url"] = changes.banner_image_url

        body = existing.body
        if "body" in fields and changes.body is not None:
            raw_body = changes.body if isinstance(changes.body, str) else json.dumps(changes.body)
            markdown = body_json_to_markdown(
                raw_body, max_depth=self.max_tree_depth, max_nodes=self.max_tree_nodes
            )
            body = parse_markdown(markdown)

        document = StoredDocument(
            metadata=existing.metadata.touched(now=self.clock(), **metadata_changes),
            title=normalize_title(changes.title) if "title" in fields else existing.title,
            body=body,
        )
        self._write(document)
        self._index(document)
        return document

    def trash(self, document_id: str) -> Path:
        """Move a document file into the trash folder.

        A document already in the trash under the same name gets a millisecond
        timestamp suffix.

        Returns:
            Path of the trashed file

        Raises:
            DocumentNotFoundError: If the document file does not exist
        """
        source = self.document_path(document_id)
        if not self.filesystem.exists(source):
            raise DocumentNotFoundError(document_id)

        self.filesystem.mkdir(self.trash_folder)
        destination = self.trash_folder / f"{document_id}{MARKDOWN_EXTENSION}"
        if self.filesystem.exists(destination):
            destination = self.trash_folder / f"{document_id}-{self._millis()}{MARKDOWN_EXTENSION}"

        self.filesystem.rename(source, destination)
        logger.info(f"Moved document {document_id} to {destination}")

        if self.indexer is not None:
            try:
                self.indexer.remove_document(document_id)
            except (OSError, ValueError) as e:
                logger.error(f"Failed to remove {document_id} from the index: {e}")
        return destination

    def list_trash(self) -> list[TrashedDocument]:
        """Documents in the trash folder, ordered by file name."""
        if not self.filesystem.exists(self.trash_folder):
            return []

        trashed = []
        for name in self.filesystem.list_dir(self.trash_folder):
            if not _is_markdown_name(name):
                continue
            document = self._read_trashed(name)
            trashed.append(
                TrashedDocument(
                    trash_name=name,
                    document_id=document.id,
                    title=document.title,
                    updated_at=document.metadata.updated_at,
                )
            )
        return trashed

    def recover(self, trash_name: str) -> RecoveryResult:
        """Move a trashed document back into the documents folder and index it again.

        The document returns under its own id. When a live document already has that
        id, the recovered one gets the first free ``<id>-<n>`` id instead, written into
        its header as well.

        Raises:
            TrashItemNotFoundError: If nothing in the trash has that file name
        """
        source = self.trash_folder / trash_name
        if (
            Path(trash_name).name != trash_name
            or trash_name in (".", "..")
            or not _is_markdown_name(trash_name)
            or not self.filesystem.exists(source)
        ):
            raise TrashItemNotFoundError(trash_name)

        document = self._read_trashed(trash_name)
        base_id = document.id
        if Path(base_id).name != base_id or base_id in (".", ".."):
            base_id = trash_name[: -len(MARKDOWN_EXTENSION)]

        document_id = base_id
        conflict_handled = False
        counter = 1
        while self.filesystem.exists(self.document_path(document_id)):
            document_id = f"{base_id}-{counter}"
            conflict_handled = True
            counter += 1

        destination = self.document_path(document_id)
        self.filesystem.mkdir(self.folder)
        self.filesystem.rename(source, destination)
        if document_id != document.id:
            document = StoredDocument(
                metadata=document.metadata.model_copy(update={"id": document_id}),
                title=document.title,
                body=document.body,
            )
            self._write(document)
        logger.info(f"Recovered {trash_name} as document {document_id}")

        self._index(self.get(document_id))
        return RecoveryResult(
            document_id=document_id,
            recovered_to=destination.name,
            conflict_handled=conflict_handled,
        )

    def _read_trashed(self, trash_name: str) -> StoredDocument:
        text = self.filesystem.read_text(self.trash_folder / trash_name)
        stem = trash_name[: -len(MARKDOWN_EXTENSION)]
        return read_markdown_file(text, fallback_id=stem, now=self.clock())

    def _millis(self) -> int:
        moment = parse_iso(self.clock()) or datetime.now(timezone.utc)
        return int(moment.timestamp() * 1000)

    def _write(self, document: StoredDocument) -> None:
        self.filesystem.write_text(self.document_path(document.id), write_markdown_file(document))

    def _index(self, document: StoredDocument) -> None:
        if self.indexer is None:
            return
        try:
            self.indexer.index_document(document)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to index document {document.id}: {e}")
