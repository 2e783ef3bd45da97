"""Tests for the /checkin endpoint."""


def test_checkin_marks_attendee(client, seed, staff_headers) -> None:
    seed("E700")

    resp = client.post("/checkin", json={"employee_id": "E700"}, headers=staff_headers)
    assert resp.status_code == 200, resp.text
    assert resp.json()["employee_id"] == "E700"
    assert resp.json()["checked_in"] is True


def test_checkin_twice_is_not_an_error(client, seed, staff_headers) -> None:
    seed("E701", checked_in=True)

    resp = client.post("/checkin", json={"employee_id": "E701"}, headers=staff_headers)
    assert resp.status_code == 200
    assert resp.json()["checked_in"] is True


def test_checkin_leaves_quotas_alone(client, seed, staff_headers) -> None:
    seed("E702", quota_indomie=1, quota_beer=3)

    data = client.post(
        "/checkin", json={"employee_id": "E702"}, headers=staff_headers
    ).json()
    assert data["quota_indomie"] == 1
    assert data["quota_beer"] == 3


def test_checkin_unknown_attendee(client, staff_headers) -> None:
    resp = client.post("/checkin", json={"employee_id": "GHOST"}, headers=staff_headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


def test_admin_can_check_in(client, seed, admin_headers) -> None:
    seed("E703")

    resp = client.post("/checkin", json={"employee_id": "E703"}, headers=admin_headers)
    assert resp.status_code == 200
