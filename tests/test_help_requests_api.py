"""API tests for listing and transitioning help requests."""

import pytest
from sqlmodel import Session

from conftest import auth_headers
from db import engine
from models import HelpRequest


def _stored(request_id: int) -> HelpRequest:
    with Session(engine) as fresh:
        help_request = fresh.get(HelpRequest, request_id)
        assert help_request is not None
        return help_request


NEW_REQUEST = {
    "requesterName": "Anna",
    "kind": "chores",
    "message": "Help carrying boxes to the attic",
    "date": "2026-11-02",
    "timeSlot": "14:00-16:00",
    "region": "Tienen",
    "street": "Kapelstraat",
    "houseNumber": "3",
    "postalCode": "3300",
    "city": "Tienen",
    "phone": "0499 99 99 99",
}


class TestCreate:
    def test_public_submission_starts_open(self, client):
        resp = client.post("/help-requests", json=NEW_REQUEST)

        assert resp.status_code == 201
        body = resp.json()
        assert body["accepted"] is False
        assert body["acceptedBy"] is None
        # anonymous submitter does not get the phone echoed back
        assert "phone" not in body
        assert _stored(body["id"]).phone == "0499 99 99 99"

    def test_accepted_fields_in_input_are_ignored(self, client):
        payload = dict(NEW_REQUEST, accepted=True, acceptedBy="sneaky@x.com")
        resp = client.post("/help-requests", json=payload)

        stored = _stored(resp.json()["id"])
        assert stored.accepted is False
        assert stored.accepted_by is None

    def test_wire_format_uses_camel_case(self, client):
        body = client.post("/help-requests", json=NEW_REQUEST).json()

        assert body["requesterName"] == "Anna"
        assert body["timeSlot"] == "14:00-16:00"
        assert body["houseNumber"] == "3"
        assert "acceptedBy" in body
        assert "accepted_by" not in body
        stored = _stored(body["id"])
        assert (stored.time_slot, stored.postal_code) == ("14:00-16:00", "3300")

    def test_snake_case_input_still_accepted(self, client):
        payload = {"requester_name": "Bert", "kind": "company", "message": "Visit", "phone": "016 11 11 11"}
        resp = client.post("/help-requests", json=payload)

        assert resp.status_code == 201
        assert resp.json()["requesterName"] == "Bert"

    def test_missing_required_field(self, client):
        payload = {key: value for key, value in NEW_REQUEST.items() if key != "phone"}
        resp = client.post("/help-requests", json=payload)
        assert resp.status_code == 400

    def test_unknown_kind(self, client):
        resp = client.post("/help-requests", json=dict(NEW_REQUEST, kind="gardening"))
        assert resp.status_code == 400


class TestList:
    @pytest.fixture
    def requests_by_state(self, make_help_request, volunteer, other_volunteer):
        return {
            "open": make_help_request(requester_name="Open"),
            "mine": make_help_request(requester_name="Mine", accepted=True, accepted_by=volunteer.email),
            "theirs": make_help_request(
                requester_name="Theirs", accepted=True, accepted_by=other_volunteer.email
            ),
        }

    def test_coordinator_sees_everything(self, client, coordinator, requests_by_state):
        resp = client.get("/help-requests", headers=auth_headers(coordinator))

        assert resp.status_code == 200
        body = resp.json()
        assert len(body) == 3
        assert all("phone" in item for item in body)

    def test_volunteer_sees_phone_only_on_own_acceptance(self, client, volunteer, requests_by_state):
        body = client.get("/help-requests", headers=auth_headers(volunteer)).json()

        phones = {item["requesterName"]: "phone" in item for item in body}
        assert phones == {"Open": False, "Mine": True, "Theirs": False}

    def test_available_view(self, client, volunteer, requests_by_state):
        body = client.get("/help-requests?view=available", headers=auth_headers(volunteer)).json()
        assert [item["requesterName"] for item in body] == ["Open"]

    def test_mine_view(self, client, volunteer, requests_by_state):
        body = client.get("/help-requests?view=mine", headers=auth_headers(volunteer)).json()
        assert [item["requesterName"] for item in body] == ["Mine"]
        assert body[0]["phone"] == "0470 12 34 56"

    def test_mine_view_needs_login(self, client, requests_by_state):
        assert client.get("/help-requests?view=mine").status_code == 401

    def test_anonymous_list_is_redacted(self, client, requests_by_state):
        body = client.get("/help-requests").json()
        assert len(body) == 3
        assert not any("phone" in item for item in body)

    def test_get_single_request(self, client, volunteer, requests_by_state):
        mine = requests_by_state["mine"]
        theirs = requests_by_state["theirs"]

        assert "phone" in client.get(f"/help-requests/{mine.id}", headers=auth_headers(volunteer)).json()
        assert "phone" not in client.get(f"/help-requests/{theirs.id}", headers=auth_headers(volunteer)).json()
        assert client.get("/help-requests/999").status_code == 404


class TestAccept:
    def test_accept(self, client, volunteer, make_help_request):
        help_request = make_help_request()

        resp = client.post(
            f"/help-requests/{help_request.id}/accept",
            json={"email": volunteer.email},
            headers=auth_headers(volunteer),
        )

        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        assert _stored(help_request.id).accepted_by == volunteer.email

    def test_second_volunteer_gets_404(self, client, volunteer, other_volunteer, make_help_request):
        help_request = make_help_request(accepted=True, accepted_by=volunteer.email)

        resp = client.post(
            f"/help-requests/{help_request.id}/accept",
            json={"email": other_volunteer.email},
            headers=auth_headers(other_volunteer),
        )

        assert resp.status_code == 404
        assert _stored(help_request.id).accepted_by == volunteer.email

    def test_missing_email(self, client, volunteer, make_help_request):
        help_request = make_help_request()
        resp = client.post(
            f"/help-requests/{help_request.id}/accept", json={}, headers=auth_headers(volunteer)
        )
        assert resp.status_code == 400

    def test_cannot_accept_on_behalf_of_someone_else(self, client, volunteer, make_help_request):
        help_request = make_help_request()
        resp = client.post(
            f"/help-requests/{help_request.id}/accept",
            json={"email": "someone-else@x.com"},
            headers=auth_headers(volunteer),
        )
        assert resp.status_code == 403
        assert _stored(help_request.id).accepted is False

    def test_anonymous_cannot_accept(self, client, make_help_request):
        help_request = make_help_request()
        resp = client.post(f"/help-requests/{help_request.id}/accept", json={"email": "v1@x.com"})
        assert resp.status_code == 401


class TestCancel:
    def test_volunteer_cancels_own(self, client, volunteer, make_help_request):
        help_request = make_help_request(accepted=True, accepted_by=volunteer.email)

        resp = client.post(
            f"/help-requests/{help_request.id}/cancel",
            json={"email": volunteer.email},
            headers=auth_headers(volunteer),
        )

        assert resp.status_code == 200
        stored = _stored(help_request.id)
        assert (stored.accepted, stored.accepted_by) == (False, None)

    def test_volunteer_cannot_cancel_others(self, client, volunteer, other_volunteer, make_help_request):
        help_request = make_help_request(accepted=True, accepted_by=volunteer.email)

        resp = client.post(
            f"/help-requests/{help_request.id}/cancel",
            json={"email": other_volunteer.email},
            headers=auth_headers(other_volunteer),
        )

        assert resp.status_code == 404
        assert _stored(help_request.id).accepted_by == volunteer.email

    def test_coordinator_cancels_any(self, client, coordinator, volunteer, make_help_request):
        help_request = make_help_request(accepted=True, accepted_by=volunteer.email)

        resp = client.post(
            f"/help-requests/{help_request.id}/cancel",
            json={"email": coordinator.email},
            headers=auth_headers(coordinator),
        )

        assert resp.status_code == 200
        assert _stored(help_request.id).accepted is False


class TestDelete:
    def test_coordinator_deletes(self, client, coordinator, make_help_request):
        help_request = make_help_request()

        resp = client.delete(f"/help-requests/{help_request.id}", headers=auth_headers(coordinator))

        assert resp.status_code == 200
        assert client.delete(f"/help-requests/{help_request.id}", headers=auth_headers(coordinator)).status_code == 404

    def test_volunteer_cannot_delete(self, client, volunteer, make_help_request):
        help_request = make_help_request()
        resp = client.delete(f"/help-requests/{help_request.id}", headers=auth_headers(volunteer))
        assert resp.status_code == 403


def test_full_lifecycle_over_http(client, coordinator, volunteer, other_volunteer):
    request_id = client.post("/help-requests", json=NEW_REQUEST).json()["id"]

    def accept(user):
        return client.post(
            f"/help-requests/{request_id}/accept", json={"email": user.email}, headers=auth_headers(user)
        )

    assert accept(volunteer).status_code == 200
    assert accept(other_volunteer).status_code == 404

    resp = client.post(
        f"/help-requests/{request_id}/cancel",
        json={"email": coordinator.email},
        headers=auth_headers(coordinator),
    )
    assert resp.status_code == 200

    assert accept(other_volunteer).status_code == 200
    stored = _stored(request_id)
    assert (stored.accepted, stored.accepted_by) == (True, other_volunteer.email)


def test_storage_failure_reports_internal_error(client, monkeypatch):
    from sqlalchemy.exc import OperationalError

    from services import store

    def unavailable(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(store, "list_help_requests", unavailable)

    resp = client.get("/help-requests")

    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error"}
