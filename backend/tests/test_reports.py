"""
Daily report tests.

Verifies:
- The 1500 @ 45% x2 scenario: 3000 / 1350 / 1650 / 825 / 825
- Empty day gives zeros and an empty breakdown (and can be saved)
- Generation is idempotent for an unchanged approved-log set
- Breakdown sums equal the totals
- Inclusive local-day window, including non-UTC zones
- Saved snapshots: regenerating adds a new one, lookup returns the latest
"""

from datetime import datetime, date

import pytest

from salonflow.models import DailyReport, Service
from salonflow.services import reporting_service, user_service
from salonflow.services.reporting_service import ReportError


DAY = "2024-01-15"


class TestReportScenario:
    """Two approved haircuts on one day."""

    def test_two_haircuts(self, db_session, barber, haircut, make_log):
        make_log(barber_id=barber.id, service=haircut, approved_at=datetime(2024, 1, 15, 9, 0))
        make_log(barber_id=barber.id, service=haircut, approved_at=datetime(2024, 1, 15, 17, 30))

        report = reporting_service.generate_daily_report(DAY, "UTC")

        assert report["total_revenue"] == pytest.approx(3000.0)
        assert report["total_barber_commissions"] == pytest.approx(1350.0)
        assert report["profit"] == pytest.approx(1650.0)
        assert report["manager_commission"] == pytest.approx(825.0)
        assert report["owner_cut"] == pytest.approx(825.0)
        assert report["approved_service_count"] == 2
        assert report["barber_breakdown"] == [
            {
                "barber_id": barber.id,
                "barber_name": "Alex Johnson",
                "revenue": pytest.approx(3000.0),
                "commission": pytest.approx(1350.0),
                "service_count": 2,
            }
        ]

    def test_only_approved_logs_count(self, db_session, barber, haircut, make_log):
        make_log(barber_id=barber.id, service=haircut, approved_at=datetime(2024, 1, 15, 9, 0))
        make_log(barber_id=barber.id, service=haircut, status="pending", created_at=datetime(2024, 1, 15, 9, 0))
        make_log(barber_id=barber.id, service=haircut, status="rejected", created_at=datetime(2024, 1, 15, 9, 0))

        report = reporting_service.generate_daily_report(DAY, "UTC")
        assert report["approved_service_count"] == 1
        assert report["total_revenue"] == pytest.approx(1500.0)

    def test_profit_identities(self, db_session, barber, other_barber, haircut, beard_trim, make_log):
        make_log(barber_id=barber.id, service=haircut, price=1800, approved_at=datetime(2024, 1, 15, 8, 0))
        make_log(barber_id=other_barber.id, service=beard_trim, approved_at=datetime(2024, 1, 15, 9, 0))
        make_log(barber_id=barber.id, service=beard_trim, approved_at=datetime(2024, 1, 15, 10, 0))

        report = reporting_service.generate_daily_report(DAY, "UTC")

        assert report["profit"] == pytest.approx(report["total_revenue"] - report["total_barber_commissions"])
        assert report["manager_commission"] == report["owner_cut"]
        assert report["manager_commission"] == pytest.approx(report["profit"] * 0.5)

        breakdown = report["barber_breakdown"]
        assert sum(line["revenue"] for line in breakdown) == pytest.approx(report["total_revenue"])
        assert sum(line["commission"] for line in breakdown) == pytest.approx(report["total_barber_commissions"])
        # First-seen order by approval time
        assert [line["barber_id"] for line in breakdown] == [barber.id, other_barber.id]

    def test_negative_profit_is_not_clamped(self, db_session, barber, make_log):
        generous = Service(name="Promo", price=1000.0, duration=30, commission_rate=1.0)
        db_session.add(generous)
        db_session.commit()
        make_log(barber_id=barber.id, service=generous, price=0, approved_at=datetime(2024, 1, 15, 9, 0))
        log = make_log(barber_id=barber.id, service=generous, approved_at=datetime(2024, 1, 15, 9, 0))
        # Commission above price (e.g. manual correction)
        log.commission_amount = 1200.0
        db_session.commit()

        report = reporting_service.generate_daily_report(DAY, "UTC")
        assert report["profit"] == pytest.approx(-200.0)
        assert report["owner_cut"] == pytest.approx(-100.0)


class TestEmptyDay:
    """No approved logs is a valid report."""

    def test_all_zero(self, db_session):
        report = reporting_service.generate_daily_report(DAY, "UTC")

        for key in ("total_revenue", "total_barber_commissions", "profit", "manager_commission", "owner_cut"):
            assert report[key] == 0.0
        assert report["barber_breakdown"] == []
        assert report["approved_service_count"] == 0

    def test_empty_report_is_persistable(self, db_session, manager_actor):
        saved = reporting_service.generate_and_save_daily_report(manager_actor, DAY, "UTC")

        assert saved.total_revenue == 0.0
        assert saved.lines == []
        assert reporting_service.get_daily_report_by_date(DAY).id == saved.id


class TestIdempotence:
    """Same approved logs, same figures."""

    def test_regenerating_gives_identical_figures(self, db_session, barber, haircut, make_log):
        make_log(barber_id=barber.id, service=haircut, approved_at=datetime(2024, 1, 15, 9, 0))

        first = reporting_service.generate_daily_report(DAY, "UTC")
        second = reporting_service.generate_daily_report(DAY, "UTC")

        assert first == second


class TestDayWindow:
    """Filtering uses [local midnight, next local midnight)."""

    def test_inclusive_bounds(self, db_session, barber, haircut, make_log):
        make_log(barber_id=barber.id, service=haircut, approved_at=datetime(2024, 1, 15, 0, 0, 0))
        make_log(barber_id=barber.id, service=haircut, approved_at=datetime(2024, 1, 15, 23, 59, 59, 999000))
        make_log(barber_id=barber.id, service=haircut, approved_at=datetime(2024, 1, 16, 0, 0, 0))
        make_log(barber_id=barber.id, service=haircut, approved_at=datetime(2024, 1, 14, 23, 59, 59))

        report = reporting_service.generate_daily_report(DAY, "UTC")
        assert report["approved_service_count"] == 2

    def test_sub_millisecond_approvals_belong_to_their_day(self, db_session, barber, haircut, make_log):
        make_log(barber_id=barber.id, service=haircut, approved_at=datetime(2024, 1, 15, 23, 59, 59, 999500))

        assert reporting_service.generate_daily_report(DAY, "UTC")["approved_service_count"] == 1
        assert reporting_service.generate_daily_report("2024-01-16", "UTC")["approved_service_count"] == 0

    def test_sub_millisecond_creations_belong_to_their_day(self, db_session, barber_actor, barber, haircut, make_log):
        make_log(barber_id=barber.id, service=haircut, status="pending",
                 created_at=datetime(2024, 1, 15, 23, 59, 59, 999500))

        today = reporting_service.barber_daily_stats(barber_actor, barber.id, day=DAY, tz_name="UTC")
        tomorrow = reporting_service.barber_daily_stats(barber_actor, barber.id, day="2024-01-16", tz_name="UTC")
        assert today["services"] == 1
        assert tomorrow["services"] == 0

    def test_window_end_is_last_millisecond(self, db_session):
        report = reporting_service.generate_daily_report(DAY, "Asia/Colombo")
        assert report["window_start"] == "2024-01-14T18:30:00Z"
        # to_utc_z drops sub-second digits
        assert report["window_end"] == "2024-01-15T18:29:59Z"

    def test_local_timezone_shifts_window(self, db_session, barber, haircut, make_log):
        # 20:00 UTC on the 14th is 01:30 on the 15th in Colombo (UTC+05:30)
        make_log(barber_id=barber.id, service=haircut, approved_at=datetime(2024, 1, 14, 20, 0))

        colombo = reporting_service.generate_daily_report(DAY, "Asia/Colombo")
        utc = reporting_service.generate_daily_report(DAY, "UTC")

        assert colombo["approved_service_count"] == 1
        assert colombo["timezone"] == "Asia/Colombo"
        assert utc["approved_service_count"] == 0

    def test_bad_inputs_raise_report_error(self, db_session):
        with pytest.raises(ReportError):
            reporting_service.generate_daily_report("15/01/2024", "UTC")
        with pytest.raises(ReportError):
            reporting_service.generate_daily_report(DAY, "Mars/Olympus")

    @pytest.mark.parametrize("day,tz_name", [(20240115, "UTC"), (DAY, 5), (["2024-01-15"], "UTC")])
    def test_non_string_inputs_raise_report_error(self, db_session, day, tz_name):
        with pytest.raises(ReportError):
            reporting_service.generate_daily_report(day, tz_name)


class TestUnknownBarber:
    """Deleted barbers resolve to 'Unknown'."""

    def test_deleted_barber_is_unknown(self, db_session, manager_actor, barber, haircut, make_log):
        make_log(barber_id=barber.id, service=haircut, approved_at=datetime(2024, 1, 15, 9, 0))
        user_service.delete_barber(manager_actor, barber.id)

        report = reporting_service.generate_daily_report(DAY, "UTC")
        assert report["barber_breakdown"][0]["barber_name"] == "Unknown"
        assert report["total_revenue"] == pytest.approx(1500.0)


class TestSnapshots:
    """Saved reports."""

    def test_latest_snapshot_wins(self, db_session, manager_actor, barber, haircut, make_log):
        make_log(barber_id=barber.id, service=haircut, approved_at=datetime(2024, 1, 15, 9, 0))
        first = reporting_service.generate_and_save_daily_report(manager_actor, DAY, "UTC")

        make_log(barber_id=barber.id, service=haircut, approved_at=datetime(2024, 1, 15, 11, 0))
        second = reporting_service.generate_and_save_daily_report(manager_actor, DAY, "UTC")

        assert db_session.query(DailyReport).count() == 2
        latest = reporting_service.get_daily_report_by_date(date(2024, 1, 15))
        assert latest.id == second.id
        assert latest.total_revenue == pytest.approx(3000.0)
        assert first.total_revenue == pytest.approx(1500.0)

    def test_missing_date_returns_none(self, db_session):
        assert reporting_service.get_daily_report_by_date("2024-02-01") is None

    def test_list_is_newest_date_first(self, db_session, manager_actor):
        reporting_service.generate_and_save_daily_report(manager_actor, "2024-01-14", "UTC")
        reporting_service.generate_and_save_daily_report(manager_actor, "2024-01-16", "UTC")
        reporting_service.generate_and_save_daily_report(manager_actor, "2024-01-15", "UTC")

        dates = [r.report_date.isoformat() for r in reporting_service.list_daily_reports()]
        assert dates == ["2024-01-16", "2024-01-15", "2024-01-14"]

    def test_breakdown_round_trips_through_storage(self, db_session, manager_actor, barber, other_barber, haircut, make_log):
        make_log(barber_id=other_barber.id, service=haircut, approved_at=datetime(2024, 1, 15, 8, 0))
        make_log(barber_id=barber.id, service=haircut, approved_at=datetime(2024, 1, 15, 9, 0))
        saved = reporting_service.generate_and_save_daily_report(manager_actor, DAY, "UTC")

        db_session.expire_all()
        stored = db_session.get(DailyReport, saved.id).to_dict()
        assert [line["barber_name"] for line in stored["barber_breakdown"]] == ["Maria Garcia", "Alex Johnson"]
        assert stored["date"] == DAY


class TestReportRoutes:
    """HTTP surface."""

    def test_generate_then_fetch(self, client, manager_headers, barber, haircut, make_log):
        make_log(barber_id=barber.id, service=haircut, approved_at=datetime(2024, 1, 15, 9, 0))

        resp = client.post("/api/reports/daily", json={"date": DAY, "timezone": "UTC"}, headers=manager_headers)
        assert resp.status_code == 201
        assert resp.json["report"]["total_revenue"] == pytest.approx(1500.0)

        resp = client.get(f"/api/reports/daily/{DAY}", headers=manager_headers)
        assert resp.status_code == 200
        assert resp.json["report"]["barber_breakdown"][0]["service_count"] == 1

        resp = client.get("/api/reports/daily", headers=manager_headers)
        assert len(resp.json["reports"]) == 1

    def test_preview_does_not_save(self, client, manager_headers, db_session):
        resp = client.get(f"/api/reports/daily/{DAY}/preview", headers=manager_headers)
        assert resp.status_code == 200
        assert resp.json["report"]["barber_breakdown"] == []
        assert db_session.query(DailyReport).count() == 0

    def test_unknown_date_is_404_and_bad_date_is_400(self, client, manager_headers):
        assert client.get("/api/reports/daily/2024-03-01", headers=manager_headers).status_code == 404
        assert client.get("/api/reports/daily/not-a-date", headers=manager_headers).status_code == 400

    def test_barber_cannot_generate(self, client, barber_headers):
        resp = client.post("/api/reports/daily", json={"date": DAY}, headers=barber_headers)
        assert resp.status_code == 403

    @pytest.mark.parametrize("body", [
        {"date": 20240115},
        {"date": DAY, "timezone": 5},
        {"date": {"year": 2024}},
    ])
    def test_non_string_fields_are_400(self, client, manager_headers, body):
        resp = client.post("/api/reports/daily", json=body, headers=manager_headers)
        assert resp.status_code == 400
        assert "error" in resp.json


class TestAnalyticsRoutes:
    """Dashboard, leaderboards and barber daily stats over stored logs."""

    def test_dashboard(self, client, manager_headers, barber, other_barber, haircut, make_log):
        make_log(barber_id=barber.id, service=haircut)
        make_log(barber_id=other_barber.id, service=haircut, status="pending")
        make_log(barber_id=other_barber.id, service=haircut, status="rejected")

        resp = client.get("/api/analytics/dashboard", headers=manager_headers)
        assert resp.status_code == 200
        assert resp.json == {
            "total_revenue": pytest.approx(1500.0),
            "total_services": 3,
            "active_barbers": 2,
            "pending_approvals": 1,
        }

    def test_leaderboards_use_approved_logs(self, client, manager_headers, barber, other_barber, haircut, beard_trim, make_log):
        make_log(barber_id=barber.id, service=beard_trim)
        make_log(barber_id=barber.id, service=beard_trim)
        make_log(barber_id=other_barber.id, service=haircut)
        make_log(barber_id=other_barber.id, service=haircut, status="pending")

        barbers = client.get("/api/analytics/leaderboard/barbers", headers=manager_headers).json["leaderboard"]
        assert [row["barber_name"] for row in barbers] == ["Alex Johnson", "Maria Garcia"]
        assert barbers[0]["revenue"] == pytest.approx(1600.0)
        assert barbers[1]["service_count"] == 1

        services = client.get("/api/analytics/leaderboard/services", headers=manager_headers).json["leaderboard"]
        assert [row["service_name"] for row in services] == ["Beard Trim", "Haircut"]

    def test_barber_daily(self, client, barber, barber_headers, haircut, make_log):
        make_log(barber_id=barber.id, service=haircut, created_at=datetime(2024, 1, 15, 9, 0))
        make_log(barber_id=barber.id, service=haircut, status="pending", created_at=datetime(2024, 1, 15, 11, 0))
        make_log(barber_id=barber.id, service=haircut, created_at=datetime(2024, 1, 16, 9, 0))

        resp = client.get(f"/api/analytics/barber-daily/{barber.id}?date=2024-01-15", headers=barber_headers)
        assert resp.status_code == 200
        assert resp.json["services"] == 2
        assert resp.json["approved_services"] == 1
        assert resp.json["pending_services"] == 1
        assert resp.json["approved_commission"] == pytest.approx(675.0)
