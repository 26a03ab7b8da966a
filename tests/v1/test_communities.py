# tests/v1/test_communities.py
"""Tests for community-related endpoints."""

from fastapi import status

from agora.models import Community, Post


def test_list_communities_largest_first(client, db_session, community) -> None:
    """Communities are listed by member count."""
    db_session.add(Community(slug="big", name="Big", member_count=40))
    db_session.flush()

    response = client.get("/api/v1/communities/")

    assert response.status_code == status.HTTP_200_OK
    slugs = [c["slug"] for c in response.json()]
    assert slugs == ["big", "test"]


def test_get_community_by_slug(client, community) -> None:
    response = client.get("/api/v1/communities/test")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["name"] == "Test Community"
    assert data["member_count"] == 0


def test_get_unknown_community(client) -> None:
    response = client.get("/api/v1/communities/nope")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_create_community_does_not_add_member(client, test_user, auth_token) -> None:
    """The creator only becomes a member once they contribute."""
    response = client.post(
        "/api/v1/communities/",
        json={"slug": "hiking", "name": "Hiking", "description": "Trails"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["slug"] == "hiking"
    assert data["created_by"] == test_user.id
    assert data["member_count"] == 0


def test_create_duplicate_community(client, community, auth_token) -> None:
    response = client.post(
        "/api/v1/communities/",
        json={"slug": "test", "name": "Again"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_409_CONFLICT


def test_create_community_invalid_slug(client, auth_token) -> None:
    response = client.post(
        "/api/v1/communities/",
        json={"slug": "Not A Slug", "name": "Bad"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_member_count_follows_contributions(client, community, auth_token, other_auth_token) -> None:
    """Posting and commenting count each user once."""
    first = client.post(
        "/api/v1/posts/",
        json={"community_id": community.id, "title": "First"},
        headers=auth_token,
    )
    post_id = first.json()["id"]
    client.post(
        "/api/v1/posts/",
        json={"community_id": community.id, "title": "Second"},
        headers=auth_token,
    )
    assert client.get("/api/v1/communities/test").json()["member_count"] == 1

    for body in ("one", "two"):
        client.post(
            "/api/v1/comments/",
            json={"post_id": post_id, "body": body},
            headers=other_auth_token,
        )
    assert client.get("/api/v1/communities/test").json()["member_count"] == 2


def test_community_posts_listing(client, community, test_post, db_session, test_user) -> None:
    deleted = Post(
        community_id=community.id, author_id=test_user.id, title="Gone", deleted=True
    )
    db_session.add(deleted)
    db_session.flush()

    response = client.get("/api/v1/communities/test/posts")

    assert response.status_code == status.HTTP_200_OK
    assert [p["title"] for p in response.json()] == ["Test post"]


def _create(client, headers, slug="books"):
    return client.post(
        "/api/v1/communities/",
        json={"slug": slug, "name": "Books", "description": "Reading"},
        headers=headers,
    )


def test_update_community(client, auth_token, other_auth_token) -> None:
    _create(client, auth_token)

    forbidden = client.put(
        "/api/v1/communities/books", json={"name": "Stolen"}, headers=other_auth_token
    )
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN

    response = client.put(
        "/api/v1/communities/books", json={"description": "Novels only"}, headers=auth_token
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["name"] == "Books"
    assert data["description"] == "Novels only"


def test_update_unknown_community(client, auth_token) -> None:
    response = client.put("/api/v1/communities/nope", json={"name": "X"}, headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_delete_community(client, auth_token, other_auth_token) -> None:
    community = _create(client, auth_token).json()
    post = client.post(
        "/api/v1/posts/",
        json={"community_id": community["id"], "title": "Gone soon"},
        headers=other_auth_token,
    ).json()

    forbidden = client.delete("/api/v1/communities/books", headers=other_auth_token)
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN

    response = client.delete("/api/v1/communities/books", headers=auth_token)
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert client.get("/api/v1/communities/books").status_code == status.HTTP_404_NOT_FOUND
    assert client.get(f"/api/v1/posts/{post['id']}").status_code == status.HTTP_404_NOT_FOUND


def test_delete_unknown_community(client, auth_token) -> None:
    response = client.delete("/api/v1/communities/nope", headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND
