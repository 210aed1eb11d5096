"""
GearGuard
Tests: Maintenance request + history API.

Covers:
    - End-to-end: admin registers equipment, a technician opens a request,
      scraps it, equipment is scrapped and history has two entries
    - Create/update validation and reference errors
    - Listing by status / equipment / team and calendar window
    - History endpoints (newest first)
    - Transition table rejection (409)
"""

import pytest

from gearguard.models.maintenance import WORKFLOW_STATUS_TRANSITIONS


def _create_request(client, headers, payload, **kw):
    body = dict(payload)
    body.update(kw)
    res = client.post("/api/v1/requests", headers=headers, json=body)
    assert res.status_code == 201, res.get_json()
    return res.get_json()


class TestRequestScenario:
    def test_scrap_lifecycle(self, client, admin_headers, member_headers, category, team):
        res = client.post("/api/v1/equipment", headers=admin_headers, json={
            "name": "CNC-1", "serial_number": "SN-1",
            "category_id": category.id, "maintenance_team_id": team.id,
        })
        assert res.status_code == 201
        cnc = res.get_json()

        listed = client.get("/api/v1/equipment", headers=member_headers).get_json()["items"]
        assert any(e["id"] == cnc["id"] and e["status"] == "active" for e in listed)

        req = _create_request(client, member_headers, {
            "type": "corrective", "subject": "Coolant leak",
            "equipment_id": cnc["id"], "maintenance_team_id": team.id,
        })
        assert req["status"] == "new"
        assert req["request_number"]

        res = client.put(f"/api/v1/requests/{req['id']}", headers=member_headers,
                         json={"status": "scrap"})
        assert res.status_code == 200
        assert res.get_json()["status"] == "scrap"

        eq = client.get(f"/api/v1/equipment/{cnc['id']}", headers=member_headers).get_json()
        assert eq["status"] == "scrapped"

        history = client.get(f"/api/v1/requests/{req['id']}/history",
                             headers=member_headers).get_json()
        assert history["total"] == 2
        assert [h["action"] for h in history["items"]] == ["status_changed", "created"]
        assert history["items"][0]["old_value"] == "new"
        assert history["items"][0]["new_value"] == "scrap"

        by_equipment = client.get(f"/api/v1/equipment/{cnc['id']}/history",
                                  headers=member_headers).get_json()
        assert by_equipment["total"] == 2

    def test_request_numbers_unique(self, client, member_headers, request_payload):
        numbers = {
            _create_request(client, member_headers, request_payload)["request_number"]
            for _ in range(4)
        }
        assert len(numbers) == 4


class TestRequestValidation:
    @pytest.mark.parametrize("field,value", [
        ("type", "urgent"),
        ("subject", None),
        ("priority", "p1"),
        ("maintenance_team_id", None),
    ])
    def test_create_rejects_bad_input(self, client, member_headers, request_payload, field, value):
        body = dict(request_payload)
        body[field] = value
        res = client.post("/api/v1/requests", headers=member_headers, json=body)
        assert res.status_code == 422
        assert client.get("/api/v1/requests", headers=member_headers).get_json()["total"] == 0

    def test_create_with_unknown_equipment(self, client, member_headers, request_payload):
        res = client.post("/api/v1/requests", headers=member_headers,
                          json=dict(request_payload, equipment_id=999))
        assert res.status_code == 404

    def test_non_object_body(self, client, member_headers):
        res = client.post("/api/v1/requests", headers=member_headers, json=[1, 2])
        assert res.status_code == 422

    def test_update_with_malformed_json(self, client, member_headers, request_payload):
        req = _create_request(client, member_headers, request_payload)
        res = client.put(f"/api/v1/requests/{req['id']}", headers=member_headers,
                         data="{not json", content_type="application/json")
        assert res.status_code == 422
        assert res.get_json()["error"] == "Request body must be valid JSON"

    def test_create_with_malformed_json(self, client, member_headers):
        res = client.post("/api/v1/requests", headers=member_headers,
                          data='{"type": "corrective",', content_type="application/json")
        assert res.status_code == 422
        assert res.get_json()["error"] == "Request body must be valid JSON"
        assert client.get("/api/v1/requests", headers=member_headers).get_json()["total"] == 0

    def test_update_unknown_request(self, client, member_headers):
        res = client.put("/api/v1/requests/999", headers=member_headers,
                         json={"status": "repaired"})
        assert res.status_code == 404

    def test_update_bad_status(self, client, member_headers, request_payload):
        req = _create_request(client, member_headers, request_payload)
        res = client.put(f"/api/v1/requests/{req['id']}", headers=member_headers,
                         json={"status": "closed"})
        assert res.status_code == 422

    def test_requires_token(self, client, request_payload):
        assert client.post("/api/v1/requests", json=request_payload).status_code == 401

    def test_invalid_token_rejected(self, client):
        res = client.get("/api/v1/requests", headers={"Authorization": "Bearer not-a-jwt"})
        assert res.status_code == 401


class TestRequestTransitions:
    def test_workflow_table_returns_conflict(self, app, client, member_headers, request_payload):
        req = _create_request(client, member_headers, request_payload)
        app.config["REQUEST_STATUS_TRANSITIONS"] = WORKFLOW_STATUS_TRANSITIONS
        try:
            res = client.put(f"/api/v1/requests/{req['id']}", headers=member_headers,
                             json={"status": "repaired"})
        finally:
            app.config["REQUEST_STATUS_TRANSITIONS"] = None
        assert res.status_code == 409
        body = res.get_json()
        assert body["code"] == "ERR_CONFLICT_STATE"
        assert body["details"] == {"current_status": "new", "target_status": "repaired"}

        history = client.get(f"/api/v1/requests/{req['id']}/history",
                             headers=member_headers).get_json()
        assert history["total"] == 1


class TestRequestQueries:
    def test_lists_by_status_equipment_team(self, client, member_headers, request_payload,
                                            equipment, team):
        a = _create_request(client, member_headers, request_payload)
        b = _create_request(client, member_headers, request_payload, priority="high")
        client.put(f"/api/v1/requests/{b['id']}", headers=member_headers,
                   json={"status": "in_progress"})

        res = client.get("/api/v1/requests", headers=member_headers).get_json()
        assert [r["id"] for r in res["items"]] == [b["id"], a["id"]]

        res = client.get("/api/v1/requests/status/in_progress", headers=member_headers)
        assert [r["id"] for r in res.get_json()["items"]] == [b["id"]]

        res = client.get(f"/api/v1/equipment/{equipment.id}/requests", headers=member_headers)
        assert res.get_json()["total"] == 2

        res = client.get(f"/api/v1/teams/{team.id}/requests", headers=member_headers)
        assert res.get_json()["total"] == 2

        res = client.get("/api/v1/requests?priority=high", headers=member_headers)
        assert [r["id"] for r in res.get_json()["items"]] == [b["id"]]

    def test_calendar_window(self, client, member_headers, request_payload):
        june = _create_request(client, member_headers, request_payload,
                               type="preventive", scheduled_date="2026-06-15")
        _create_request(client, member_headers, request_payload,
                        type="preventive", scheduled_date="2026-07-15")
        res = client.get(
            "/api/v1/requests?scheduled_from=2026-06-01&scheduled_to=2026-06-30",
            headers=member_headers,
        )
        assert [r["id"] for r in res.get_json()["items"]] == [june["id"]]

    def test_bad_filter_values(self, client, member_headers):
        res = client.get("/api/v1/requests?equipment_id=abc", headers=member_headers)
        assert res.status_code == 422
        res = client.get("/api/v1/requests?scheduled_from=someday", headers=member_headers)
        assert res.status_code == 422

    def test_get_request(self, client, member_headers, request_payload):
        req = _create_request(client, member_headers, request_payload)
        res = client.get(f"/api/v1/requests/{req['id']}", headers=member_headers)
        assert res.status_code == 200
        assert res.get_json()["subject"] == "Spindle vibration"
