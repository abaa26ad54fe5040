from fastapi.testclient import TestClient

from tentacle.api import create_app
from tentacle.storage.repository import DocumentRepository


def create_document(client: TestClient, **payload) -> dict:
    """Helper creating a document through the API and returning its payload."""
    response = client.post("/api/documents", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_health_check(test_client: TestClient) -> None:
    response = test_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_create_document_returns_editor_payload(test_client: TestClient) -> None:
    """A new document starts with one empty paragraph and matching timestamps."""
    document = create_document(test_client, title="First note", tags=["Work", "#work"])

    assert document["title"] == "First note"
    assert document["tags"] == ["work"]
    assert document["banner_image_url"] is None
    assert document["body"] == {"type": "doc", "content": [{"type": "paragraph"}]}
    assert document["created_at"] == document["updated_at"]


def test_create_document_without_body(test_client: TestClient) -> None:
    response = test_client.post("/api/documents")

    assert response.status_code == 201
    assert response.json()["title"] == "Untitled"


def test_get_document(test_client: TestClient) -> None:
    created = create_document(test_client, title="Readable")

    response = test_client.get(f"/api/documents/{created['id']}")

    assert response.status_code == 200
    document = response.json()
    assert document["id"] == created["id"]
    assert document["title"] == "Readable"
    assert document["body"] == {"type": "doc", "content": []}


def test_get_missing_document_returns_404(test_client: TestClient) -> None:
    response = test_client.get("/api/documents/missing")

    assert response.status_code == 404
    assert response.json() == {"detail": "Document not found"}


def test_update_document(test_client: TestClient) -> None:
    created = create_document(test_client, title="Draft")
    body = {
        "type": "doc",
        "content": [
            {
                "type": "heading",
                "attrs": {"level": 2},
                "content": [{"type": "text", "text": "Plan"}],
            },
            {
                "type": "paragraph",
                "content": [
                    {"type": "text", "text": "Ship "},
                    {"type": "text", "text": "it", "marks": [{"type": "bold"}]},
                ],
            },
        ],
    }

    response = test_client.patch(
        f"/api/documents/{created['id']}",
        json={"title": "Final", "body": body, "tags": ["Done"]},
    )

    assert response.status_code == 200
    document = response.json()
    assert document["title"] == "Final"
    assert document["tags"] == ["done"]
    assert document["body"] == body
    assert document["created_at"] == created["created_at"]
    assert document["updated_at"] > created["updated_at"]


def test_update_with_no_fields_returns_400(test_client: TestClient) -> None:
    created = create_document(test_client, title="Untouched")

    response = test_client.patch(f"/api/documents/{created['id']}", json={})

    assert response.status_code == 400


def test_update_missing_document_returns_404(test_client: TestClient) -> None:
    response = test_client.patch("/api/documents/missing", json={"title": "x"})

    assert response.status_code == 404


def test_list_documents(test_client: TestClient) -> None:
    first = create_document(test_client, title="First")
    second = create_document(test_client, title="Second")
    test_client.patch(f"/api/documents/{first['id']}", json={"body": "Edited body"})

    response = test_client.get("/api/documents")

    assert response.status_code == 200
    records = response.json()
    assert [record["id"] for record in records] == [first["id"], second["id"]]
    assert records[0]["body"] == "Edited body"


def test_trash_document(test_client: TestClient) -> None:
    created = create_document(test_client, title="Temporary")

    response = test_client.delete(f"/api/documents/{created['id']}")

    assert response.status_code == 200
    assert response.json() == {"id": created["id"], "status": "trashed"}
    assert test_client.get(f"/api/documents/{created['id']}").status_code == 404
    assert test_client.get("/api/documents").json() == []


def test_trash_missing_document_returns_404(test_client: TestClient) -> None:
    assert test_client.delete("/api/documents/missing").status_code == 404


def test_list_and_recover_trash(test_client: TestClient) -> None:
    created = create_document(test_client, title="Second chance")
    test_client.delete(f"/api/documents/{created['id']}")

    trash = test_client.get("/api/trash")

    assert trash.status_code == 200
    assert trash.json() == [
        {
            "trash_name": f"{created['id']}.md",
            "document_id": created["id"],
            "title": "Second chance",
            "updated_at": created["updated_at"],
        }
    ]

    response = test_client.post(f"/api/trash/{created['id']}.md/recover")

    assert response.status_code == 200
    assert response.json() == {
        "document_id": created["id"],
        "recovered_to": f"{created['id']}.md",
        "conflict_handled": False,
    }
    assert test_client.get(f"/api/documents/{created['id']}").status_code == 200
    assert test_client.get("/api/trash").json() == []


def test_recover_missing_trash_item_returns_404(test_client: TestClient) -> None:
    response = test_client.post("/api/trash/missing.md/recover")

    assert response.status_code == 404
    assert response.json() == {"detail": "Trash item not found"}


def test_prepare_query(test_client: TestClient) -> None:
    response = test_client.get("/api/search/prepare", params={"q": "ml"})

    assert response.status_code == 200
    assert response.json() == {
        "normalized": "machine learning",
        "fts_query": "ml",
        "semantic_weight": 0.0,
        "bm25_weight": 1.0,
    }


def test_search(test_client: TestClient) -> None:
    response = test_client.get("/api/search", params={"q": "review", "exclude": "doc-c"})

    assert response.status_code == 200
    assert response.json() == [
        {"document_id": "doc-a", "score": 0.9},
        {"document_id": "doc-b", "score": 0.4},
    ]


def test_search_route_requires_backend(repository: DocumentRepository) -> None:
    client = TestClient(create_app(repository=repository))

    assert client.get("/api/search", params={"q": "review"}).status_code == 404
