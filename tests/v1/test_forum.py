# mypy: ignore-errors
# tests/v1/test_forum.py
"""Tests for forum endpoints."""

from fastapi import status

from tests.conftest import bearer

CONTENT = "Enough words to pass the content minimum."


def create_topic(client, headers, title="Raising a seed round", **extra):
    payload = {"title": title, "content": CONTENT, **extra}
    response = client.post("/api/v1/forum/topics", json=payload, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


def test_list_categories_is_public(client, general_category) -> None:
    response = client.get("/api/v1/forum/categories")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [c["slug"] for c in data] == ["general"]
    assert data[0]["topics_count"] == 0


def test_create_category_requires_admin(client, alice_headers, admin_headers) -> None:
    payload = {"name": "Deal Flow", "description": "Opportunities", "icon": "briefcase"}

    response = client.post("/api/v1/forum/categories", json=payload, headers=alice_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = client.post("/api/v1/forum/categories", json=payload, headers=admin_headers)
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["slug"] == "deal-flow"

    response = client.post("/api/v1/forum/categories", json=payload, headers=admin_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Category already exists"


def test_general_category_lifecycle(client, general_category, alice_headers, admin_headers) -> None:
    topic = create_topic(client, alice_headers, category_id=general_category.id)

    categories = client.get("/api/v1/forum/categories").json()
    assert categories[0]["topics_count"] == 1

    response = client.delete(
        f"/api/v1/forum/categories/{general_category.id}",
        headers=admin_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Cannot delete category with existing topics"

    response = client.delete(f"/api/v1/forum/topics/{topic['id']}", headers=alice_headers)
    assert response.status_code == status.HTTP_200_OK
    assert client.get("/api/v1/forum/categories").json()[0]["topics_count"] == 0

    response = client.delete(
        f"/api/v1/forum/categories/{general_category.id}",
        headers=admin_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    assert client.get("/api/v1/forum/categories").json() == []


def test_create_topic_validation(client, alice_headers) -> None:
    response = client.post(
        "/api/v1/forum/topics",
        json={"title": "Hi", "content": CONTENT},
        headers=alice_headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_create_topic_requires_authentication(client) -> None:
    response = client.post("/api/v1/forum/topics", json={"title": "Hello", "content": CONTENT})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_get_topic_counts_views(client, alice_headers) -> None:
    topic = create_topic(client, alice_headers, tags=["Seed", "funding"])
    assert topic["tags"] == ["seed", "funding"]

    client.get(f"/api/v1/forum/topics/{topic['id']}", headers=alice_headers)
    response = client.get(f"/api/v1/forum/topics/{topic['id']}", headers=alice_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["views"] == 2
    assert response.json()["content"] == CONTENT


def test_reply_flow(client, bob, alice_headers, bob_headers) -> None:
    topic = create_topic(client, alice_headers)

    response = client.post(
        f"/api/v1/forum/topics/{topic['id']}/replies",
        json={"content": "Happy to share our deck."},
        headers=bob_headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    reply = response.json()
    assert reply["author"]["id"] == bob.id

    detail = client.get(f"/api/v1/forum/topics/{topic['id']}", headers=alice_headers).json()
    assert detail["last_reply_by"] == bob.id
    assert detail["replies_count"] == 1

    response = client.post(f"/api/v1/forum/replies/{reply['id']}/like", headers=alice_headers)
    assert response.json() == {"liked": True, "likes_count": 1}

    response = client.put(
        f"/api/v1/forum/replies/{reply['id']}",
        json={"content": "Edited"},
        headers=alice_headers,
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = client.delete(f"/api/v1/forum/replies/{reply['id']}", headers=bob_headers)
    assert response.status_code == status.HTTP_200_OK

    detail = client.get(f"/api/v1/forum/topics/{topic['id']}", headers=alice_headers).json()
    assert detail["replies"][0]["is_deleted"] is True
    assert detail["last_reply_by"] is None


def test_locked_topic_rejects_replies(client, moderator, alice_headers, bob_headers) -> None:
    topic = create_topic(client, alice_headers)

    response = client.post(f"/api/v1/forum/topics/{topic['id']}/lock", headers=alice_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = client.post(f"/api/v1/forum/topics/{topic['id']}/lock", headers=bearer(moderator))
    assert response.json()["is_locked"] is True

    response = client.post(
        f"/api/v1/forum/topics/{topic['id']}/replies",
        json={"content": "Too late"},
        headers=bob_headers,
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "Topic is locked"


def test_list_topics_with_filters(client, general_category, alice_headers, bob_headers) -> None:
    first = create_topic(client, alice_headers, category_id=general_category.id)
    second = create_topic(client, alice_headers, title="Hiring a CFO")
    client.post(
        f"/api/v1/forum/topics/{second['id']}/replies",
        json={"content": "Try our network"},
        headers=bob_headers,
    )

    data = client.get("/api/v1/forum/topics").json()
    assert [t["id"] for t in data["topics"]] == [second["id"], first["id"]]
    assert data["pagination"]["total"] == 2

    unanswered = client.get("/api/v1/forum/topics", params={"filter": "unanswered"}).json()
    assert [t["id"] for t in unanswered["topics"]] == [first["id"]]

    by_category = client.get("/api/v1/forum/topics", params={"category": "general"}).json()
    assert [t["id"] for t in by_category["topics"]] == [first["id"]]

    response = client.get("/api/v1/forum/topics", params={"filter": "hot"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_search_and_tags(client, alice_headers) -> None:
    create_topic(client, alice_headers, tags=["funding", "seed"])
    create_topic(client, alice_headers, title="Seed extensions", tags=["seed"])

    results = client.get("/api/v1/forum/search", params={"query": "seed"}).json()
    assert len(results) == 2

    tags = client.get("/api/v1/forum/trending-tags").json()
    assert tags == [{"tag": "seed", "count": 2}, {"tag": "funding", "count": 1}]

    options = client.get("/api/v1/forum/topic-form-options", headers=alice_headers).json()
    assert options["max_tags"] == 5
    assert options["suggested_tags"] == ["seed", "funding"]

    filters = client.get("/api/v1/forum/filters").json()
    assert filters["filters"] == ["recent", "popular", "unanswered"]


def test_reconcile_requires_admin(client, alice_headers, admin_headers) -> None:
    response = client.post("/api/v1/forum/categories/reconcile", headers=alice_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = client.post("/api/v1/forum/categories/reconcile", headers=admin_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == []
