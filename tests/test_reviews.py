import pytest

BASE = "/api/v1/reviews"


@pytest.fixture
def review(client, manager, auth_headers, feedback_payload):
    return client.post("/api/v1/feedback", json=feedback_payload(), headers=auth_headers(manager)).json()


def test_assigned_reviews_are_the_authors_drafts(client, review, manager, employee, auth_headers):
    assigned = client.get(f"{BASE}/assigned", headers=auth_headers(manager)).json()
    assert [r["id"] for r in assigned] == [review["id"]]
    # Drafts are invisible to the receiver
    assert client.get(f"{BASE}/received", headers=auth_headers(employee)).json() == []


def test_given_and_received_after_submit(client, review, manager, employee, auth_headers):
    client.post(f"/api/v1/feedback/{review['id']}/submit", headers=auth_headers(manager))

    given = client.get(f"{BASE}/given", headers=auth_headers(manager)).json()
    received = client.get(f"{BASE}/received", headers=auth_headers(employee)).json()
    assert [r["id"] for r in given] == [review["id"]]
    assert [r["id"] for r in received] == [review["id"]]
    assert received[0]["colorClassification"] is None


def test_complete_review(client, review, manager, auth_headers):
    client.post(f"/api/v1/feedback/{review['id']}/submit", headers=auth_headers(manager))
    response = client.post(f"{BASE}/{review['id']}/complete", headers=auth_headers(manager))
    assert response.status_code == 200
    assert response.json()["status"] == "completed"


def test_dashboard(client, review, cycle, manager, employee, auth_headers):
    client.post(f"/api/v1/feedback/{review['id']}/submit", headers=auth_headers(manager))
    client.post(f"/api/v1/feedback/{review['id']}/complete", headers=auth_headers(manager))

    dashboard = client.get(f"{BASE}/dashboard", headers=auth_headers(employee)).json()
    assert dashboard["received"] == 1
    assert dashboard["completed"] == 1
    assert dashboard["pendingAcknowledgment"] == 1
    assert dashboard["assigned"] == 0
    assert [c["id"] for c in dashboard["activeCycles"]] == [cycle.id]


def test_templates(client, employee, auth_headers):
    templates = client.get(f"{BASE}/templates", headers=auth_headers(employee)).json()
    assert len(templates) == 6
    assert {t["reviewType"] for t in templates} >= {"manager_review", "360_review"}

    peer = client.get(f"{BASE}/templates/peer_review", headers=auth_headers(employee)).json()
    assert peer["title"] == "Peer Review"
    assert peer["questions"]

    assert client.get(f"{BASE}/templates/unknown", headers=auth_headers(employee)).status_code == 404
