# tests/v1/test_comments.py
"""Tests for comment-related endpoints."""

from fastapi import status


def _comment(client, headers, post_id, body, parent=None):
    return client.post(
        "/api/v1/comments/",
        json={"post_id": post_id, "body": body, "parent_comment_id": parent},
        headers=headers,
    )


def test_create_and_list_comments(client, test_post, test_user, auth_token) -> None:
    created = _comment(client, auth_token, test_post.id, "First!")
    assert created.status_code == status.HTTP_201_CREATED
    assert created.json()["author_id"] == test_user.id

    reply = _comment(client, auth_token, test_post.id, "Reply", parent=created.json()["id"])
    assert reply.status_code == status.HTTP_201_CREATED

    listing = client.get(f"/api/v1/comments/post/{test_post.id}")
    assert listing.status_code == status.HTTP_200_OK
    assert [c["body"] for c in listing.json()] == ["First!", "Reply"]
    assert client.get(f"/api/v1/posts/{test_post.id}").json()["comment_count"] == 2


def test_comment_on_missing_post(client, auth_token) -> None:
    response = _comment(client, auth_token, 9999, "Hello?")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_reply_to_missing_parent(client, test_post, auth_token) -> None:
    response = _comment(client, auth_token, test_post.id, "Orphan", parent=9999)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_reply_to_parent_on_other_post(client, community, test_post, auth_token) -> None:
    other = client.post(
        "/api/v1/posts/",
        json={"community_id": community.id, "title": "Other"},
        headers=auth_token,
    ).json()
    parent = _comment(client, auth_token, other["id"], "Elsewhere").json()

    response = _comment(client, auth_token, test_post.id, "Cross", parent=parent["id"])
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_delete_comment(client, test_post, auth_token, other_auth_token) -> None:
    comment = _comment(client, auth_token, test_post.id, "Temporary").json()

    forbidden = client.delete(f"/api/v1/comments/{comment['id']}", headers=other_auth_token)
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN

    response = client.delete(f"/api/v1/comments/{comment['id']}", headers=auth_token)
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert client.get(f"/api/v1/comments/post/{test_post.id}").json() == []
    assert client.get(f"/api/v1/posts/{test_post.id}").json()["comment_count"] == 0

    missing = client.delete(f"/api/v1/comments/{comment['id']}", headers=auth_token)
    assert missing.status_code == status.HTTP_404_NOT_FOUND


def test_edit_comment(client, test_post, auth_token, other_auth_token) -> None:
    comment = _comment(client, auth_token, test_post.id, "Teh typo").json()
    assert comment["updated_at"] is None

    forbidden = client.put(
        f"/api/v1/comments/{comment['id']}", json={"body": "Mine now"}, headers=other_auth_token
    )
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN

    response = client.put(
        f"/api/v1/comments/{comment['id']}", json={"body": "The typo"}, headers=auth_token
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["body"] == "The typo"
    assert response.json()["updated_at"] is not None
    assert [c["body"] for c in client.get(f"/api/v1/comments/post/{test_post.id}").json()] == [
        "The typo"
    ]


def test_edit_missing_comment(client, auth_token) -> None:
    response = client.put("/api/v1/comments/9999", json={"body": "Hello"}, headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_edit_comment_requires_auth(client, test_post, auth_token) -> None:
    comment = _comment(client, auth_token, test_post.id, "Stay").json()
    response = client.put(f"/api/v1/comments/{comment['id']}", json={"body": "Go"})
    assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)


def test_delete_comment_with_replies(client, test_post, auth_token, other_auth_token) -> None:
    parent = _comment(client, auth_token, test_post.id, "Parent").json()
    reply = _comment(client, other_auth_token, test_post.id, "Reply", parent=parent["id"]).json()
    _comment(client, auth_token, test_post.id, "Nested", parent=reply["id"])
    _comment(client, other_auth_token, test_post.id, "Sibling")

    response = client.delete(f"/api/v1/comments/{parent['id']}", headers=auth_token)
    assert response.status_code == status.HTTP_204_NO_CONTENT

    remaining = client.get(f"/api/v1/comments/post/{test_post.id}").json()
    assert [c["body"] for c in remaining] == ["Sibling"]
    assert client.get(f"/api/v1/posts/{test_post.id}").json()["comment_count"] == len(remaining)
