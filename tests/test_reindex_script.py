import json
from pathlib import Path

from scripts.reindex import main
from tentacle.embedders.hash_embedder import LOCAL_EMBEDDING_MODEL_ID
from tentacle.index_store.local import LocalIndexStore

NOTE = """---
id: "note-1"
created_at: "2025-01-01T00:00:00.000Z"
updated_at: "2025-01-02T00:00:00.000Z"
banner_image_url: null
tags: ["research"]
---

# Hybrid search

Blend **BM25** with vector similarity.
"""


def test_reindex_builds_index_from_folder(documents_folder: Path, tmp_path: Path) -> None:
    """Every document file ends up in the saved index with its embeddings."""
    (documents_folder / "note-1.md").write_text(NOTE, encoding="utf-8")
    (documents_folder / "loose.md").write_text("Just a line of text.\n", encoding="utf-8")
    index_path = tmp_path / "out" / "index.json"

    result = main(
        in_folder=str(documents_folder),
        local_outfile_index=str(index_path),
        chunk_target_chars=800,
        chunk_overlap_chars=200,
    )

    assert result.synced == 2
    assert result.failed == 0
    data = json.loads(index_path.read_text(encoding="utf-8"))
    assert set(data["documents"]) == {"note-1", "loose"}
    assert data["documents"]["note-1"]["body"] == "Blend BM25 with vector similarity."
    assert data["documents"]["loose"]["title"] == "Untitled"

    store = LocalIndexStore(index_path)
    embedding = store.get_document_embedding("note-1")
    assert embedding is not None
    assert embedding.model == LOCAL_EMBEDDING_MODEL_ID
    assert embedding.vector.shape == (384,)
    chunks = store.get_chunk_embeddings("note-1")
    assert [chunk.chunk_text for chunk in chunks] == [
        "Hybrid search\n\nBlend BM25 with vector similarity."
    ]


def test_reindex_drops_documents_no_longer_on_disk(documents_folder: Path, tmp_path: Path) -> None:
    index_path = tmp_path / "index.json"
    note_path = documents_folder / "note-1.md"
    note_path.write_text(NOTE, encoding="utf-8")
    main(str(documents_folder), str(index_path), 800, 200)

    note_path.unlink()
    result = main(str(documents_folder), str(index_path), 800, 200)

    assert result.synced == 0
    store = LocalIndexStore(index_path)
    assert store.list_documents() == []
    assert store.get_document_embedding("note-1") is None
