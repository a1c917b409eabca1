from unittest.mock import patch

import pytest
from fastapi import status

from feedback_hub.services.comment_service import CommentService


@pytest.fixture
def feedback_id(client, manager, auth_headers, feedback_payload):
    response = client.post("/api/v1/feedback", json=feedback_payload(), headers=auth_headers(manager))
    feedback_id = response.json()["id"]
    client.post(f"/api/v1/feedback/{feedback_id}/submit", headers=auth_headers(manager))
    return feedback_id


def _url(feedback_id, comment_id=None):
    url = f"/api/v1/feedback/{feedback_id}/comments"
    return f"{url}/{comment_id}" if comment_id else url


def test_create_comment_returns_201_with_content(client, feedback_id, employee, auth_headers):
    response = client.post(_url(feedback_id), json={"content": "Thanks for this"}, headers=auth_headers(employee))
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["content"] == "Thanks for this"
    assert data["userId"] == employee.id
    assert data["isPrivate"] is False


def test_author_comes_from_identity_not_body(client, feedback_id, employee, manager, auth_headers):
    response = client.post(
        _url(feedback_id),
        json={"content": "Hello", "userId": manager.id},
        headers=auth_headers(employee),
    )
    assert response.json()["userId"] == employee.id


def test_empty_comment_is_rejected(client, feedback_id, employee, auth_headers):
    response = client.post(_url(feedback_id), json={"content": ""}, headers=auth_headers(employee))
    assert response.status_code == 422


def test_list_hides_other_users_private_comments(client, feedback_id, manager, employee, auth_headers):
    client.post(_url(feedback_id), json={"content": "Public note"}, headers=auth_headers(manager))
    client.post(_url(feedback_id), json={"content": "Note to self", "isPrivate": True}, headers=auth_headers(manager))

    seen_by_employee = client.get(_url(feedback_id), headers=auth_headers(employee)).json()
    assert [c["content"] for c in seen_by_employee] == ["Public note"]

    seen_by_author = client.get(_url(feedback_id), headers=auth_headers(manager)).json()
    assert len(seen_by_author) == 2


def test_recipient_cannot_comment_on_draft(client, manager, employee, auth_headers, feedback_payload):
    draft = client.post(
        "/api/v1/feedback", json=feedback_payload(review_type="peer_review"), headers=auth_headers(manager)
    ).json()
    response = client.post(_url(draft["id"]), json={"content": "Early look"}, headers=auth_headers(employee))
    assert response.status_code == 404
    assert client.get(_url(draft["id"]), headers=auth_headers(employee)).status_code == 404

    # The author can still annotate their own draft
    assert client.post(_url(draft["id"]), json={"content": "Todo"}, headers=auth_headers(manager)).status_code == 201


def test_outsider_cannot_comment(client, feedback_id, peer, auth_headers):
    response = client.post(_url(feedback_id), json={"content": "Hi"}, headers=auth_headers(peer))
    assert response.status_code == 403


def test_reply_must_belong_to_same_feedback(client, feedback_id, employee, auth_headers):
    response = client.post(
        _url(feedback_id), json={"content": "Reply", "parentCommentId": "unknown"}, headers=auth_headers(employee)
    )
    assert response.status_code == 400


def test_reply_to_comment(client, feedback_id, manager, employee, auth_headers):
    parent = client.post(_url(feedback_id), json={"content": "Question?"}, headers=auth_headers(manager)).json()
    reply = client.post(
        _url(feedback_id), json={"content": "Answer", "parentCommentId": parent["id"]}, headers=auth_headers(employee)
    )
    assert reply.status_code == 201
    assert reply.json()["parentCommentId"] == parent["id"]


def test_update_comment(client, feedback_id, employee, manager, auth_headers):
    comment = client.post(_url(feedback_id), json={"content": "Frist"}, headers=auth_headers(employee)).json()

    response = client.put(_url(feedback_id, comment["id"]), json={"content": "First"}, headers=auth_headers(employee))
    assert response.status_code == 200
    assert response.json()["content"] == "First"

    other = client.put(_url(feedback_id, comment["id"]), json={"content": "Mine now"}, headers=auth_headers(manager))
    assert other.status_code == 403


def test_delete_comment_returns_204_empty(client, feedback_id, employee, auth_headers):
    comment = client.post(_url(feedback_id), json={"content": "Oops"}, headers=auth_headers(employee)).json()

    response = client.delete(_url(feedback_id, comment["id"]), headers=auth_headers(employee))
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert response.content == b""

    missing = client.delete(_url(feedback_id, comment["id"]), headers=auth_headers(employee))
    assert missing.status_code == 404


def test_comment_under_wrong_feedback_is_not_found(client, feedback_id, employee, auth_headers):
    comment = client.post(_url(feedback_id), json={"content": "Here"}, headers=auth_headers(employee)).json()
    response = client.delete(_url("other-feedback", comment["id"]), headers=auth_headers(employee))
    assert response.status_code == 404


def test_unexpected_service_error_reaches_shared_handler(unsafe_client, feedback_id, employee, auth_headers):
    with patch.object(CommentService, "find_by_feedback_id", side_effect=RuntimeError("db down")):
        response = unsafe_client.get(_url(feedback_id), headers=auth_headers(employee))
    assert response.status_code == 500
    assert response.json()["success"] is False

    # The app keeps serving afterwards
    assert unsafe_client.get("/health").status_code == 200
