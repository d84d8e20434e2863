# mypy: ignore-errors
# tests/v1/test_resources.py
"""Tests for resource library endpoints."""

from fastapi import status


def add_comment(client, resource_id, headers, text="Great read"):
    return client.post(
        f"/api/v1/resources/{resource_id}/comments",
        json={"comment": text},
        headers=headers,
    )


def test_search_resources(client, resource, alice_headers) -> None:
    response = client.get("/api/v1/resources", params={"search": "term"}, headers=alice_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [r["id"] for r in data["resources"]] == [resource.id]
    assert data["resources"][0]["is_new"] is True
    assert data["pagination"] == {"total": 1, "page": 1, "limit": 12, "pages": 1}

    data = client.get("/api/v1/resources", params={"type": "video"}, headers=alice_headers).json()
    assert data["resources"] == []


def test_static_routes_precede_resource_id(client, resource, alice_headers) -> None:
    recent = client.get("/api/v1/resources/recent", headers=alice_headers)
    assert recent.status_code == status.HTTP_200_OK
    assert [r["id"] for r in recent.json()] == [resource.id]

    options = client.get("/api/v1/resources/filter-options", headers=alice_headers)
    assert options.json()["types"] == ["guide"]


def test_create_resource_admin_only(client, alice_headers, admin_headers) -> None:
    payload = {
        "title": "Pitch Deck Template",
        "description": "Ten slides that work.",
        "category": "Fundraising",
        "resource_type": "template",
    }

    response = client.post("/api/v1/resources", json=payload, headers=alice_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = client.post("/api/v1/resources", json=payload, headers=admin_headers)
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["level"] == "intermediate"


def test_get_resource_detail(client, resource, alice_headers) -> None:
    client.post(f"/api/v1/resources/{resource.id}/bookmark", headers=alice_headers)

    response = client.get(f"/api/v1/resources/{resource.id}", headers=alice_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["is_bookmarked"] is True
    assert data["is_liked"] is False
    assert data["bookmarks_count"] == 1

    response = client.get("/api/v1/resources/99999", headers=alice_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_like_toggle_twice(client, resource, alice_headers) -> None:
    first = client.post(f"/api/v1/resources/{resource.id}/like", headers=alice_headers)
    second = client.post(f"/api/v1/resources/{resource.id}/like", headers=alice_headers)

    assert first.json() == {"liked": True, "likes_count": 1}
    assert second.json() == {"liked": False, "likes_count": 0}


def test_access_and_views(client, resource, alice_headers) -> None:
    first = client.post(f"/api/v1/resources/{resource.id}/access", headers=alice_headers)
    again = client.post(f"/api/v1/resources/{resource.id}/access", headers=alice_headers)
    assert first.json()["first_access"] is True
    assert again.json()["first_access"] is False

    response = client.post(f"/api/v1/resources/{resource.id}/view", headers=alice_headers)
    assert response.json() == {"views": 1}


def test_comment_roundtrip_restores_counts(client, resource, alice, alice_headers) -> None:
    response = add_comment(client, resource.id, alice_headers)
    assert response.status_code == status.HTTP_201_CREATED
    comment = response.json()
    assert comment["author"]["id"] == alice.id

    commenters = client.get(
        f"/api/v1/resources/{resource.id}/commenters",
        headers=alice_headers,
    ).json()
    assert [(c["member"]["id"], c["comment_count"]) for c in commenters] == [(alice.id, 1)]
    detail = client.get(f"/api/v1/resources/{resource.id}", headers=alice_headers).json()
    assert detail["comment_count"] == 1

    response = client.delete(
        f"/api/v1/resources/{resource.id}/comments/{comment['id']}",
        headers=alice_headers,
    )
    assert response.status_code == status.HTTP_200_OK

    detail = client.get(f"/api/v1/resources/{resource.id}", headers=alice_headers).json()
    assert detail["comment_count"] == 0
    commenters = client.get(
        f"/api/v1/resources/{resource.id}/commenters",
        headers=alice_headers,
    ).json()
    assert commenters == []


def test_comment_length_limit(client, resource, alice_headers) -> None:
    assert add_comment(client, resource.id, alice_headers, "x" * 1000).status_code == (
        status.HTTP_201_CREATED
    )

    response = add_comment(client, resource.id, alice_headers, "x" * 1001)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Comment cannot exceed 1000 characters"


def test_delete_comment_forbidden_for_others(client, resource, alice_headers, bob_headers) -> None:
    comment = add_comment(client, resource.id, alice_headers).json()

    response = client.delete(
        f"/api/v1/resources/{resource.id}/comments/{comment['id']}",
        headers=bob_headers,
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_comment_replies_and_likes(client, resource, bob, alice_headers, bob_headers) -> None:
    comment = add_comment(client, resource.id, alice_headers).json()

    response = client.post(
        f"/api/v1/resources/{resource.id}/comments/{comment['id']}/replies",
        json={"text": "Agreed"},
        headers=bob_headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["author_id"] == bob.id

    response = client.post(
        f"/api/v1/resources/{resource.id}/comments/{comment['id']}/like",
        headers=bob_headers,
    )
    assert response.json() == {"liked": True, "likes_count": 1}

    listing = client.get(
        f"/api/v1/resources/{resource.id}/comments",
        params={"sort_by": "most_liked"},
        headers=alice_headers,
    ).json()
    assert listing["comments"][0]["replies"][0]["text"] == "Agreed"
    assert listing["comments"][0]["liked_by"] == [bob.id]
    assert listing["pagination"]["total"] == 1
