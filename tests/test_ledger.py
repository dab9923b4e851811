"""Unit tests for the trip ledger, counter rules and day-end archival."""

from datetime import datetime, timezone

from todadispatch.domain.entities import Trip
from todadispatch.domain.ledger import NO_RESET_NOTE, RESET_NOTE, TripLedger

ARRIVAL = datetime(2026, 10, 17, 18, 0, tzinfo=timezone.utc)


def _issue(ledger: TripLedger, fare: float = 20.0, plate: str = "V1") -> Trip:
    trip = Trip(
        id=ledger.issue_id(),
        day=ledger.day,
        vehicle_plate=plate,
        operator_name="Juan",
        passenger_count=1,
        origin="Gate",
        destination="Market",
        total_fare=fare,
    )
    ledger.record(trip)
    return trip


class TestCounter:
    def test_ids_strictly_increase(self):
        ledger = TripLedger()
        assert [ledger.issue_id() for _ in range(3)] == [1, 2, 3]
        assert ledger.next_id == 4

    def test_reset_refused_while_active(self):
        ledger = TripLedger()
        _issue(ledger)
        assert ledger.reset_counter() is False
        assert ledger.next_id == 2

    def test_reset_starts_new_day(self):
        ledger = TripLedger()
        _issue(ledger).complete(ARRIVAL)
        assert ledger.reset_counter() is True
        assert ledger.next_id == 1
        assert ledger.day == 2

    def test_restore_never_below_highest_id(self):
        ledger = TripLedger()
        ledger.today = [_issue(ledger) for _ in range(3)]
        ledger.restore_counter(1)
        assert ledger.next_id == 4

    def test_restore_counts_archived_ids_of_the_same_day(self):
        ledger = TripLedger()
        open_trip = _issue(ledger)
        _issue(ledger).complete(ARRIVAL)
        ledger.close_day("2026-10-17")
        ledger.today = [open_trip]

        ledger.restore_counter(1, ledger.day)

        assert [t.id for t in ledger.archive] == [2]
        assert ledger.next_id == 3


class TestCloseDay:
    def test_archives_completed_and_resets(self):
        ledger = TripLedger()
        t1 = _issue(ledger, fare=40.0)
        t1.complete(ARRIVAL)

        summary = ledger.close_day("2026-10-17")

        assert ledger.archive == [t1]
        assert ledger.today == []
        assert t1.service_date == "2026-10-17"
        assert summary.archived_count == 1
        assert summary.total_fares == 40.0
        assert summary.counter_reset is True
        assert ledger.next_id == 1

    def test_active_trip_blocks_reset(self):
        ledger = TripLedger()
        t1 = _issue(ledger, plate="V1")
        t2 = _issue(ledger, plate="V2")
        t2.complete(ARRIVAL)

        summary = ledger.close_day("2026-10-17")

        assert ledger.archive == [t2]
        assert ledger.today == [t1]
        assert summary.counter_reset is False
        assert summary.remaining_active == 1
        assert ledger.next_id == 3

    def test_archive_keeps_original_order(self):
        ledger = TripLedger()
        trips = [_issue(ledger, plate=f"V{i}") for i in range(4)]
        for t in (trips[2], trips[0], trips[3]):
            t.complete(ARRIVAL)

        ledger.close_day("2026-10-17")

        assert [t.id for t in ledger.archive] == [1, 3, 4]
        assert [t.id for t in ledger.today] == [2]

    def test_nothing_completed_is_noop(self):
        ledger = TripLedger()
        active = _issue(ledger)

        summary = ledger.close_day("2026-10-17")

        assert summary.archived_count == 0
        assert summary.total_fares == 0
        assert ledger.archive == []
        assert ledger.today == [active]
        assert ledger.next_id == 2

    def test_empty_ledger_summary(self):
        ledger = TripLedger()
        summary = ledger.close_day("2026-10-17")
        assert summary.archived_count == 0
        assert summary.counter_reset is True
        assert ledger.day == 1  # counter was already at 1

    def test_report_text(self):
        ledger = TripLedger()
        _issue(ledger, fare=40.0).complete(ARRIVAL)
        report = ledger.close_day("2026-10-17").report
        assert report.startswith("--- End of Day Report ---")
        assert "Total Completed Trips: 1" in report
        assert "Total Fares Earned: ₱40.00" in report
        assert RESET_NOTE in report

    def test_report_mentions_no_reset(self):
        ledger = TripLedger()
        _issue(ledger)
        assert NO_RESET_NOTE in ledger.close_day("2026-10-17").report

    def test_ids_unique_across_days(self):
        ledger = TripLedger()
        _issue(ledger).complete(ARRIVAL)
        ledger.close_day("2026-10-17")
        _issue(ledger).complete(ARRIVAL)
        ledger.close_day("2026-10-17")

        keys = [(t.day, t.id) for t in ledger.archive]
        assert keys == [(1, 1), (2, 1)]
