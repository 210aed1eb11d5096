"""
GearGuard
Tests: maintenance request lifecycle (service level).

Covers:
    - create: status new, unique sequential numbers, "created" history row
    - create validation + dangling references write nothing
    - best-effort history on create never fails the request
    - update: status change writes exactly one history row
    - unchanged / omitted status writes no history
    - scrap cascade to equipment, and its idempotence
    - configurable transition table
"""

from types import SimpleNamespace

import pytest

from gearguard.core.exceptions import NotFoundError, ValidationError
from gearguard.models import db as _db
from gearguard.models.equipment import Equipment
from gearguard.models.history import MaintenanceHistory
from gearguard.models.maintenance import WORKFLOW_STATUS_TRANSITIONS, MaintenanceRequest
from gearguard.services.request_lifecycle import (
    TransitionError,
    create_request,
    get_request,
    list_requests,
    requests_by_equipment,
    requests_by_status,
    requests_by_team,
    update_request,
)

from conftest import make_equipment, make_team


def _history(request_id):
    return (
        MaintenanceHistory.query
        .filter_by(request_id=request_id)
        .order_by(MaintenanceHistory.id)
        .all()
    )


def _create(payload, actor, **overrides):
    data = dict(payload)
    data.update(overrides)
    req = create_request(data, actor)
    _db.session.commit()
    return req


# ═════════════════════════════════════════════════════════════════════════════
# CREATE
# ═════════════════════════════════════════════════════════════════════════════

class TestCreateRequest:
    def test_new_request_starts_as_new(self, request_payload, member):
        req = _create(request_payload, member)
        assert req.id is not None
        assert req.status == "new"
        assert req.priority == "medium"
        assert req.request_number.startswith("MR-")

    def test_request_numbers_are_unique_and_sequential(self, request_payload, member):
        numbers = [_create(request_payload, member).request_number for _ in range(3)]
        assert len(set(numbers)) == 3
        suffixes = [int(n.rsplit("-", 1)[1]) for n in numbers]
        assert suffixes == [1, 2, 3]

    def test_writes_created_history(self, request_payload, member):
        req = _create(request_payload, member, priority="high")
        entries = _history(req.id)
        assert len(entries) == 1
        assert entries[0].action == "created"
        assert entries[0].changed_by == member.id
        assert entries[0].equipment_id == req.equipment_id
        assert '"priority": "high"' in entries[0].new_value
        assert '"subject": "Spindle vibration"' in entries[0].new_value

    def test_scheduled_date_parsed_as_utc(self, request_payload, member):
        req = _create(request_payload, member, type="preventive",
                      scheduled_date="2026-03-01T09:30:00+02:00")
        assert req.scheduled_date.hour == 7

    @pytest.mark.parametrize("field,value", [
        ("type", "emergency"),
        ("type", None),
        ("subject", ""),
        ("subject", "x" * 256),
        ("priority", "urgent"),
        ("equipment_id", "abc"),
        ("scheduled_date", "next tuesday"),
    ])
    def test_invalid_input_rejected_before_write(self, request_payload, member, field, value):
        data = dict(request_payload)
        data[field] = value
        with pytest.raises(ValidationError):
            create_request(data, member)
        _db.session.rollback()
        assert MaintenanceRequest.query.count() == 0
        assert MaintenanceHistory.query.count() == 0

    def test_missing_equipment_is_not_found(self, request_payload, member):
        with pytest.raises(NotFoundError):
            create_request(dict(request_payload, equipment_id=9999), member)
        _db.session.rollback()
        assert MaintenanceRequest.query.count() == 0

    def test_missing_team_is_not_found(self, request_payload, member):
        with pytest.raises(NotFoundError):
            create_request(dict(request_payload, maintenance_team_id=9999), member)

    def test_history_failure_does_not_fail_create(self, request_payload):
        # changed_by points at a user that does not exist: the FK rejects
        # the history row, the request itself must survive.
        ghost = SimpleNamespace(id=99999, role="user")
        req = _create(request_payload, ghost)
        assert _db.session.get(MaintenanceRequest, req.id) is not None
        assert _history(req.id) == []


# ═════════════════════════════════════════════════════════════════════════════
# UPDATE
# ═════════════════════════════════════════════════════════════════════════════

class TestUpdateRequest:
    def test_status_change_writes_one_history_row(self, request_payload, member):
        req = _create(request_payload, member)
        update_request(req.id, {"status": "in_progress"}, member)
        _db.session.commit()

        entries = _history(req.id)
        assert [e.action for e in entries] == ["created", "status_changed"]
        assert entries[1].old_value == "new"
        assert entries[1].new_value == "in_progress"
        assert entries[1].changed_by == member.id

    def test_unchanged_status_writes_no_history(self, request_payload, member):
        req = _create(request_payload, member)
        update_request(req.id, {"status": "new", "notes": "checked"}, member)
        _db.session.commit()
        assert [e.action for e in _history(req.id)] == ["created"]
        assert get_request(req.id).notes == "checked"

    def test_omitted_status_updates_fields_only(self, request_payload, member, admin):
        req = _create(request_payload, member)
        update_request(req.id, {
            "priority": "critical",
            "assigned_to_user_id": admin.id,
            "started_at": "2026-01-05T08:00:00Z",
            "duration_minutes": 90,
        }, member)
        _db.session.commit()

        fresh = get_request(req.id)
        assert fresh.priority == "critical"
        assert fresh.assigned_to_user_id == admin.id
        assert fresh.duration_minutes == 90
        assert fresh.status == "new"
        assert len(_history(req.id)) == 1

    def test_unknown_request_is_not_found(self, member):
        with pytest.raises(NotFoundError):
            update_request(424242, {"status": "repaired"}, member)

    def test_unknown_assignee_is_not_found(self, request_payload, member):
        req = _create(request_payload, member)
        with pytest.raises(NotFoundError):
            update_request(req.id, {"assigned_to_user_id": 9999}, member)

    def test_invalid_status_rejected(self, request_payload, member):
        req = _create(request_payload, member)
        with pytest.raises(ValidationError):
            update_request(req.id, {"status": "done"}, member)

    def test_negative_duration_rejected(self, request_payload, member):
        req = _create(request_payload, member)
        with pytest.raises(ValidationError):
            update_request(req.id, {"duration_minutes": -5}, member)

    def test_free_transitions_by_default(self, request_payload, member):
        req = _create(request_payload, member)
        update_request(req.id, {"status": "repaired"}, member)
        update_request(req.id, {"status": "new"}, member)
        _db.session.commit()
        assert get_request(req.id).status == "new"
        assert len(_history(req.id)) == 3

    def test_workflow_table_rejects_transition(self, request_payload, member):
        req = _create(request_payload, member)
        with pytest.raises(TransitionError):
            update_request(req.id, {"status": "repaired"}, member,
                           transitions=WORKFLOW_STATUS_TRANSITIONS)
        _db.session.rollback()
        assert get_request(req.id).status == "new"
        assert len(_history(req.id)) == 1

    def test_configured_transition_table_is_used(self, app, request_payload, member):
        req = _create(request_payload, member)
        app.config["REQUEST_STATUS_TRANSITIONS"] = WORKFLOW_STATUS_TRANSITIONS
        try:
            with pytest.raises(TransitionError):
                update_request(req.id, {"status": "repaired"}, member)
            update_request(req.id, {"status": "in_progress"}, member)
        finally:
            app.config["REQUEST_STATUS_TRANSITIONS"] = None
        _db.session.commit()
        assert get_request(req.id).status == "in_progress"


# ═════════════════════════════════════════════════════════════════════════════
# SCRAP CASCADE
# ═════════════════════════════════════════════════════════════════════════════

class TestScrapCascade:
    def test_scrap_marks_equipment_scrapped(self, request_payload, member, equipment):
        req = _create(request_payload, member)
        update_request(req.id, {"status": "scrap"}, member)
        _db.session.commit()

        assert _db.session.get(Equipment, equipment.id).status == "scrapped"
        assert [e.action for e in _history(req.id)] == ["created", "status_changed"]

    def test_other_statuses_leave_equipment_alone(self, request_payload, member, equipment):
        req = _create(request_payload, member)
        update_request(req.id, {"status": "repaired"}, member)
        _db.session.commit()
        assert _db.session.get(Equipment, equipment.id).status == "active"

    def test_scrap_is_idempotent(self, request_payload, member, equipment):
        req = _create(request_payload, member)
        update_request(req.id, {"status": "scrap"}, member)
        update_request(req.id, {"status": "scrap"}, member)
        _db.session.commit()

        assert _db.session.get(Equipment, equipment.id).status == "scrapped"
        assert len([e for e in _history(req.id) if e.action == "status_changed"]) == 1

    def test_second_request_scrap_on_scrapped_equipment(self, request_payload, member, equipment):
        first = _create(request_payload, member)
        second = _create(request_payload, member)
        update_request(first.id, {"status": "scrap"}, member)
        update_request(second.id, {"status": "scrap"}, member)
        _db.session.commit()
        assert _db.session.get(Equipment, equipment.id).status == "scrapped"


# ═════════════════════════════════════════════════════════════════════════════
# READS
# ═════════════════════════════════════════════════════════════════════════════

class TestRequestQueries:
    def test_list_is_newest_first(self, request_payload, member):
        first = _create(request_payload, member)
        second = _create(request_payload, member)
        assert [r.id for r in list_requests()] == [second.id, first.id]

    def test_filters(self, request_payload, member, category, team):
        other_team = make_team("Electricians")
        other_eq = make_equipment(category, other_team, name="Printer-1", serial_number="SN-2")
        a = _create(request_payload, member, priority="high")
        b = _create(request_payload, member, equipment_id=other_eq.id,
                    maintenance_team_id=other_team.id)
        update_request(b.id, {"status": "in_progress"}, member)
        _db.session.commit()

        assert [r.id for r in requests_by_status("in_progress")] == [b.id]
        assert [r.id for r in requests_by_equipment(other_eq.id)] == [b.id]
        assert [r.id for r in requests_by_team(team.id)] == [a.id]
        assert [r.id for r in list_requests(priority="high")] == [a.id]

    def test_calendar_window(self, request_payload, member):
        from gearguard.utils.helpers import parse_datetime
        inside = _create(request_payload, member, type="preventive", scheduled_date="2026-05-10")
        _create(request_payload, member, type="preventive", scheduled_date="2026-06-10")
        found = list_requests(
            scheduled_from=parse_datetime("2026-05-01"),
            scheduled_to=parse_datetime("2026-05-31"),
        )
        assert [r.id for r in found] == [inside.id]

    def test_get_unknown_is_not_found(self):
        with pytest.raises(NotFoundError):
            get_request(1)
