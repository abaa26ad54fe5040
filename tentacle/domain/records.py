"""Document records handed between the repository, the indexer and the index store."""

from typing import Annotated

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, BeforeValidator, PlainSerializer

from tentacle.domain.document import StructuredDocument
from tentacle.domain.metadata import FrontmatterMetadata
from tentacle.ingestion.text_extractor import extract_plain_text


class StoredDocument(BaseModel):
    """A document as read from or written to its Markdown file.

    Attributes:
        metadata: Frontmatter header
        title: Title taken from the ``# `` heading line
        body: Structured tree of everything below the title
    """

    metadata: FrontmatterMetadata
    title: str
    body: StructuredDocument

    @property
    def id(self) -> str:
        return self.metadata.id

    @property
    def plain_text(self) -> str:
        return extract_plain_text(self.body)


class DocumentCreate(BaseModel):
    title: str | None = None
    tags: list[str] = []


class DocumentUpdate(BaseModel):
    """Fields to change on save; fields left unset keep their stored value.

    ``body`` is editor JSON, as a string or already decoded. A string that is not
    editor JSON is taken as Markdown.
    """

    title: str | None = None
    body: str | dict | None = None
    tags: list[str] | None = None
    banner_image_url: str | None = None

    def is_empty(self) -> bool:
        return not self.model_fields_set


class DocumentChunk(BaseModel):
    """A slice of a document's text, title prepended, ready for embedding."""

    text: str
    index: int


class DocumentListRecord(BaseModel):
    """Row the search backend keeps for every document."""

    id: str
    title: str
    body: str
    tags: list[str] = []
    banner_image_url: str | None = None
    created_at: str
    updated_at: str


def nd_array_before_validator(x: list[float]) -> NDArray[np.float32]:
    return np.array(x, dtype=np.float32)


def nd_array_serializer(x: NDArray[np.float32]) -> list[float]:
    return x.tolist()  # type: ignore


NumPyArray = Annotated[
    np.ndarray,
    BeforeValidator(nd_array_before_validator),
    PlainSerializer(nd_array_serializer, return_type=list),
]


class DocumentEmbeddingRecord(BaseModel):
    """Embedding of a whole document (title and body text)."""

    document_id: str
    content_hash: str
    model: str
    vector: NumPyArray
    updated_at: str

    model_config = {"arbitrary_types_allowed": True, "protected_namespaces": ()}


class ChunkEmbeddingRecord(BaseModel):
    """Embedding of one chunk of a document.

    Attributes:
        document_id: Id of the owning document
        chunk_index: Zero-based position of the chunk
        chunk_text: Text that was embedded
        content_hash: Hash of the whole chunk set and model, used to skip unchanged documents
        model: Embedding model identifier
        vector: Embedding vector
        updated_at: When the record was produced
    """

    document_id: str
    chunk_index: int
    chunk_text: str
    content_hash: str
    model: str
    vector: NumPyArray
    updated_at: str

    model_config = {"arbitrary_types_allowed": True, "protected_namespaces": ()}

    @property
    def key(self) -> str:
        return f"{self.document_id}_{self.chunk_index}"


class TrashedDocument(BaseModel):
    """A document file sitting in the trash folder.

    Attributes:
        trash_name: File name inside the trash folder, used to recover the document
        document_id: Id from the file's header, or the file name stem when it has none
        title: Title taken from the ``# `` heading line
        updated_at: Last update before the document was trashed
    """

    trash_name: str
    document_id: str
    title: str
    updated_at: str


class RecoveryResult(BaseModel):
    document_id: str
    recovered_to: str
    conflict_handled: bool
