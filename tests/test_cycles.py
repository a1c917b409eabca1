from datetime import date, timedelta

import pytest
from fastapi import status

BASE = "/api/v1/cycles"


def _cycle_body(**overrides):
    body = {
        "name": "H2 Performance",
        "type": "annual",
        "startDate": date.today().isoformat(),
        "endDate": (date.today() + timedelta(days=180)).isoformat(),
    }
    body.update(overrides)
    return body


def test_hr_creates_draft_cycle_in_own_org(client, org, hr_user, auth_headers):
    response = client.post(BASE, json=_cycle_body(), headers=auth_headers(hr_user))
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["status"] == "draft"
    assert data["organizationId"] == org.id
    assert data["createdBy"] == hr_user.id


def test_employee_cannot_create_cycle(client, employee, auth_headers):
    assert client.post(BASE, json=_cycle_body(), headers=auth_headers(employee)).status_code == 403


def test_list_is_scoped_to_organization(client, cycle, other_org, make_user, employee, auth_headers):
    assert [c["id"] for c in client.get(BASE, headers=auth_headers(employee)).json()] == [cycle.id]

    outsider = make_user("olga@globex.io", organization=other_org)
    assert client.get(BASE, headers=auth_headers(outsider)).json() == []
    assert client.get(f"{BASE}/{cycle.id}", headers=auth_headers(outsider)).status_code == 403


def test_list_filters_by_status(client, cycle, employee, auth_headers):
    assert client.get(BASE, params={"status": "closed"}, headers=auth_headers(employee)).json() == []
    assert len(client.get(BASE, params={"status": "active"}, headers=auth_headers(employee)).json()) == 1


def test_update_and_close(client, cycle, admin_user, auth_headers):
    updated = client.put(f"{BASE}/{cycle.id}", json={"name": "Q3 Calibration"}, headers=auth_headers(admin_user))
    assert updated.json()["name"] == "Q3 Calibration"

    closed = client.post(f"{BASE}/{cycle.id}/close", headers=auth_headers(admin_user))
    assert closed.json()["status"] == "closed"

    assert client.put(f"{BASE}/{cycle.id}", json={"name": "Late"}, headers=auth_headers(admin_user)).status_code == 400
    assert client.post(f"{BASE}/{cycle.id}/activate", headers=auth_headers(admin_user)).status_code == 400


def test_update_rejects_inverted_dates(client, cycle, admin_user, auth_headers):
    response = client.put(
        f"{BASE}/{cycle.id}",
        json={"endDate": (cycle.start_date - timedelta(days=1)).isoformat()},
        headers=auth_headers(admin_user),
    )
    assert response.status_code == 400


def test_draft_cycle_activation(client, hr_user, auth_headers):
    draft = client.post(BASE, json=_cycle_body(status="draft"), headers=auth_headers(hr_user)).json()
    response = client.post(f"{BASE}/{draft['id']}/activate", headers=auth_headers(hr_user))
    assert response.json()["status"] == "active"


def test_delete_cycle_with_feedback_is_refused(client, cycle, manager, admin_user, auth_headers, feedback_payload):
    client.post("/api/v1/feedback", json=feedback_payload(), headers=auth_headers(manager))
    assert client.delete(f"{BASE}/{cycle.id}", headers=auth_headers(admin_user)).status_code == 400


def test_delete_empty_cycle(client, cycle, admin_user, auth_headers):
    response = client.delete(f"{BASE}/{cycle.id}", headers=auth_headers(admin_user))
    assert response.status_code == 204
    assert client.get(f"{BASE}/{cycle.id}", headers=auth_headers(admin_user)).status_code == 404


def test_super_admin_must_name_organization(client, super_admin, org, auth_headers):
    assert client.post(BASE, json=_cycle_body(), headers=auth_headers(super_admin)).status_code == 400
    response = client.post(BASE, json=_cycle_body(organizationId=org.id), headers=auth_headers(super_admin))
    assert response.status_code == 201
    assert response.json()["organizationId"] == org.id
