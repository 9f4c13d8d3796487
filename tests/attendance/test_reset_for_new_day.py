from __future__ import annotations

from datetime import date, datetime

from attendance_ledger.attendance.model import AttendanceRecord
from attendance_ledger.core.enums import ErrorCode


def _open_record(attendance_id: str, employee_id: str, work_date: date, first_clock_in: str, total: str = "00:00:00"):
    return AttendanceRecord(
        attendance_id=attendance_id,
        employee_id=employee_id,
        work_date=work_date,
        first_clock_in=first_clock_in,
        last_clock_out=None,
        num_clock_ins=1,
        total_hours_worked=total,
    )


def test_reset_finalizes_open_records_and_skips_failures(service, attendance_repo, clock):
    today = clock.now().date()
    attendance_repo.add(_open_record("a", "emp-1", today, "08:00:00"))
    attendance_repo.add(_open_record("b", "emp-2", today, "09:00:00", total="01:00:00"))
    attendance_repo.add(_open_record("c", "emp-3", today, "10:00:00"))
    attendance_repo.failing_employees.add("emp-2")
    clock.set_time("23:59:00")

    summary = service.reset_attendance_for_new_day()

    assert sorted(r.employee_id for r in summary.finalized) == ["emp-1", "emp-3"]
    assert [emp for emp, _ in summary.failures] == ["emp-2"]
    assert summary.failures[0][1].code == ErrorCode.STORE_FAILURE

    assert attendance_repo.get_by_id("a").last_clock_out == "23:59:59"
    assert attendance_repo.get_by_id("a").total_hours_worked == "15:59:00"
    assert attendance_repo.get_by_id("c").total_hours_worked == "13:59:00"
    assert attendance_repo.get_by_id("b").last_clock_out is None


def test_reset_after_midnight_closes_yesterday_at_its_own_end_of_day(service, attendance_repo, clock):
    yesterday = clock.now().date()
    attendance_repo.add(_open_record("a", "emp-1", yesterday, "22:00:00", total="02:00:00"))
    clock.current = datetime(2026, 2, 3, 0, 0, 5)

    summary = service.reset_attendance_for_new_day()

    rec = attendance_repo.get_by_id("a")
    assert summary.finalized == [rec]
    assert rec.last_clock_out == "23:59:59"
    assert rec.total_hours_worked == "03:59:59"
    assert service.get_today_attendance("emp-1") is None


def test_reset_leaves_closed_records_alone(service, attendance_repo, clock):
    service.clock_in("emp-1")
    clock.set_time("17:00:00")
    service.clock_out("emp-1")
    updates_before = len(attendance_repo.updates)

    summary = service.reset_attendance_for_new_day()

    assert summary.finalized == []
    assert summary.failures == []
    assert len(attendance_repo.updates) == updates_before


def test_reset_reports_failed_scan(service, attendance_repo):
    attendance_repo.fail_list_open = True

    summary = service.reset_attendance_for_new_day()

    assert summary.finalized == []
    assert summary.failures[0][0] == "*"
    assert summary.failures[0][1].retryable is True


def test_next_clock_in_after_reset_starts_a_new_record(service, attendance_repo, clock):
    service.clock_in("emp-1")
    clock.current = datetime(2026, 2, 3, 0, 0, 5)
    service.reset_attendance_for_new_day()
    clock.set_time("08:30:00")

    rec = service.clock_in("emp-1")

    assert rec.work_date == date(2026, 2, 3)
    assert rec.num_clock_ins == 1
    assert rec.total_hours_worked == "00:00:00"
    assert len(attendance_repo.all()) == 2


def test_reset_skips_record_closed_after_the_scan(service, attendance_repo, clock):
    today = clock.now().date()
    attendance_repo.add(_open_record("a", "emp-1", today, "08:00:00"))
    stale = attendance_repo.list_open()
    clock.set_time("17:00:00")
    service.clock_out("emp-1")
    attendance_repo.list_open = lambda: stale
    updates_before = len(attendance_repo.updates)

    summary = service.reset_attendance_for_new_day()

    assert summary.finalized == []
    assert summary.failures == []
    assert len(attendance_repo.updates) == updates_before
    assert attendance_repo.get_by_id("a").last_clock_out == "17:00:00"
