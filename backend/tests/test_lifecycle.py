"""
Service log approval lifecycle tests.

Verifies:
- pending -> approved / rejected, both terminal
- Exactly one of approved_at / rejected_at once decided
- Only managers decide; only pending logs can be deleted
- Batch decisions report per-id outcomes
- A failed commit leaves the in-memory log as it was
"""

import pytest
from sqlalchemy.exc import OperationalError

from salonflow.errors import AuthorizationError, NotFoundError
from salonflow.extensions import db
from salonflow.models import ServiceLog
from salonflow.services import lifecycle_service
from salonflow.services.lifecycle_service import LifecycleError, can_transition


class TestStateMachine:
    """Allowed transitions."""

    @pytest.mark.parametrize(
        "from_status,to_status,allowed",
        [
            ("pending", "approved", True),
            ("pending", "rejected", True),
            ("approved", "rejected", False),
            ("rejected", "approved", False),
            ("approved", "pending", False),
            ("pending", "pending", False),
        ],
    )
    def test_can_transition(self, from_status, to_status, allowed):
        assert can_transition(from_status, to_status) is allowed

    def test_unknown_status_raises(self):
        with pytest.raises(LifecycleError):
            can_transition("pending", "archived")


class TestApproveReject:
    """Single-log decisions."""

    def test_approve_sets_only_approved_at(self, db_session, manager_actor, manager, barber, haircut, make_log):
        log = make_log(barber_id=barber.id, service=haircut, status="pending")

        lifecycle_service.approve_service_log(manager_actor, log.id)

        assert log.status == "approved"
        assert log.approved_at is not None
        assert log.rejected_at is None
        assert log.decided_by_user_id == manager.id

    def test_reject_sets_only_rejected_at(self, db_session, manager_actor, barber, haircut, make_log):
        log = make_log(barber_id=barber.id, service=haircut, status="pending")

        lifecycle_service.reject_service_log(manager_actor, log.id)

        assert log.status == "rejected"
        assert log.rejected_at is not None
        assert log.approved_at is None

    @pytest.mark.parametrize("terminal", ["approved", "rejected"])
    def test_decided_logs_are_terminal(self, db_session, manager_actor, barber, haircut, make_log, terminal):
        log = make_log(barber_id=barber.id, service=haircut, status=terminal)

        with pytest.raises(LifecycleError):
            lifecycle_service.approve_service_log(manager_actor, log.id)
        with pytest.raises(LifecycleError):
            lifecycle_service.reject_service_log(manager_actor, log.id)

    def test_barber_cannot_approve(self, db_session, barber_actor, barber, haircut, make_log):
        log = make_log(barber_id=barber.id, service=haircut, status="pending")

        with pytest.raises(AuthorizationError):
            lifecycle_service.approve_service_log(barber_actor, log.id)
        assert log.status == "pending"

    def test_unknown_log(self, db_session, manager_actor):
        with pytest.raises(NotFoundError):
            lifecycle_service.approve_service_log(manager_actor, "missing")


class TestDeletePolicy:
    """Only pending logs can be deleted."""

    def test_deleting_pending_log_succeeds(self, db_session, barber_actor, barber, haircut, make_log):
        log = make_log(barber_id=barber.id, service=haircut, status="pending")
        log_id = log.id

        lifecycle_service.delete_service_log(barber_actor, log_id)

        assert db_session.get(ServiceLog, log_id) is None

    @pytest.mark.parametrize("decided", ["approved", "rejected"])
    def test_deleting_decided_log_is_rejected(self, db_session, manager_actor, barber, haircut, make_log, decided):
        log = make_log(barber_id=barber.id, service=haircut, status=decided)

        with pytest.raises(LifecycleError):
            lifecycle_service.delete_service_log(manager_actor, log.id)
        assert db_session.get(ServiceLog, log.id) is not None

    def test_barber_cannot_delete_other_barbers_log(self, db_session, barber_actor, other_barber, haircut, make_log):
        log = make_log(barber_id=other_barber.id, service=haircut, status="pending")

        with pytest.raises(AuthorizationError):
            lifecycle_service.delete_service_log(barber_actor, log.id)

    def test_delete_routes(self, client, barber_headers, barber, haircut, make_log):
        pending = make_log(barber_id=barber.id, service=haircut, status="pending")
        approved = make_log(barber_id=barber.id, service=haircut, status="approved")

        resp = client.delete(f"/api/service-logs/{approved.id}", headers=barber_headers)
        assert resp.status_code == 409

        resp = client.delete(f"/api/service-logs/{pending.id}", headers=barber_headers)
        assert resp.status_code == 200


class TestBatchDecisions:
    """Per-id outcomes."""

    def test_batch_approve_reports_failures(self, db_session, manager_actor, barber, haircut, make_log):
        first = make_log(barber_id=barber.id, service=haircut, status="pending")
        second = make_log(barber_id=barber.id, service=haircut, status="pending")
        done = make_log(barber_id=barber.id, service=haircut, status="rejected")

        succeeded, failed = lifecycle_service.approve_service_logs_batch(
            manager_actor, [first.id, done.id, "missing", second.id]
        )

        assert [log.id for log in succeeded] == [first.id, second.id]
        assert [f["id"] for f in failed] == [done.id, "missing"]
        assert done.status == "rejected"

    def test_batch_requires_manager(self, db_session, barber_actor, barber, haircut, make_log):
        log = make_log(barber_id=barber.id, service=haircut, status="pending")

        with pytest.raises(AuthorizationError):
            lifecycle_service.reject_service_logs_batch(barber_actor, [log.id])

    def test_batch_routes(self, client, manager_headers, barber, haircut, make_log):
        a = make_log(barber_id=barber.id, service=haircut, status="pending")
        b = make_log(barber_id=barber.id, service=haircut, status="pending")

        resp = client.post("/api/service-logs/reject", json={"ids": [a.id, b.id]}, headers=manager_headers)
        assert resp.status_code == 200
        assert len(resp.json["succeeded"]) == 2
        assert resp.json["failed"] == []

        resp = client.post("/api/service-logs/approve", json={"ids": []}, headers=manager_headers)
        assert resp.status_code == 400

    def test_pending_queue_and_single_approve_route(self, client, manager_headers, barber, haircut, make_log):
        log = make_log(barber_id=barber.id, service=haircut, status="pending")

        resp = client.get("/api/service-logs/pending", headers=manager_headers)
        assert [row["id"] for row in resp.json["service_logs"]] == [log.id]

        resp = client.post(f"/api/service-logs/{log.id}/approve", headers=manager_headers)
        assert resp.status_code == 200
        assert resp.json["service_log"]["status"] == "approved"

        resp = client.post(f"/api/service-logs/{log.id}/reject", headers=manager_headers)
        assert resp.status_code == 409


class TestOptimisticRollback:
    """Failed writes revert in-memory changes."""

    def test_failed_commit_restores_pending_state(
        self, db_session, manager_actor, barber, haircut, make_log, monkeypatch
    ):
        log = make_log(barber_id=barber.id, service=haircut, status="pending")

        def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(db.session, "commit", failing_commit)

        with pytest.raises(OperationalError):
            lifecycle_service.approve_service_log(manager_actor, log.id)

        assert log.status == "pending"
        assert log.approved_at is None
        assert log.decided_by_user_id is None

        monkeypatch.undo()
        db_session.expire_all()
        assert db_session.get(ServiceLog, log.id).status == "pending"

    def test_failed_commit_surfaces_as_503(self, client, manager_headers, barber, haircut, make_log, monkeypatch):
        log = make_log(barber_id=barber.id, service=haircut, status="pending")

        real_commit = db.session.commit

        def commit_failing_for_logs():
            # Session bookkeeping during auth still commits
            if any(isinstance(obj, ServiceLog) for obj in db.session.dirty):
                raise OperationalError("COMMIT", {}, Exception("database is locked"))
            real_commit()

        monkeypatch.setattr(db.session, "commit", commit_failing_for_logs)
        resp = client.post(f"/api/service-logs/{log.id}/approve", headers=manager_headers)
        monkeypatch.undo()

        assert resp.status_code == 503
        assert resp.json["error"] == "Service temporarily unavailable. Please try again."
