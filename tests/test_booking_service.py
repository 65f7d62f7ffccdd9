"""Unit tests for booking creation, editing, overlap checks, cancellation and visibility."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime, timedelta
from sqlalchemy import text
from vehicle_booking.errors import ConflictError, ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from vehicle_booking.models.audit_log import AuditLog
from vehicle_booking.models.booking import Booking
from vehicle_booking.services.approval_service import resolve_approval
from vehicle_booking.services.booking_service import (
    cancel_booking, create_booking, designate_approver, find_overlapping_bookings, get_booking, list_bookings,
    update_booking,
)
from vehicle_booking.utils.pagination import PageParams


async def book(db, actor, start, end, vehicle_id=1, driver_id=1, **kwargs):
    return await create_booking(db, actor, vehicle_id=vehicle_id, driver_id=driver_id,
                                start_date=start, end_date=end, **kwargs)


class TestCreateBooking:
    @pytest.mark.asyncio
    async def test_creates_pending_booking_with_two_approvals(self, seeded, users, window):
        start, end = window
        booking = await book(seeded, users["mike"], start, end, notes="Site visit")

        assert booking.status == "pending"
        assert booking.user_id == users["mike"].id
        assert booking.created_by == users["mike"].id
        assert booking.department == "Mining"
        assert [(a.level, a.status) for a in booking.approvals] == [(1, "pending"), (2, "pending")]
        assert booking.approvals[0].approver_id == users["l1"].id
        assert booking.approvals[1].approver_id == users["l2"].id

    @pytest.mark.asyncio
    async def test_end_must_follow_start(self, seeded, users, window):
        start, _ = window
        with pytest.raises(ValidationError):
            await book(seeded, users["mike"], start, start)
        assert seeded.query(Booking).count() == 0

    @pytest.mark.asyncio
    async def test_start_in_the_past(self, seeded, users):
        start = datetime.utcnow() - timedelta(days=30)
        with pytest.raises(ValidationError) as exc:
            await book(seeded, users["mike"], start, start + timedelta(hours=2))
        assert exc.value.message == "Start date cannot be in the past"
        assert seeded.query(Booking).count() == 0

    @pytest.mark.asyncio
    async def test_unknown_vehicle_and_driver(self, seeded, users, window):
        start, end = window
        with pytest.raises(NotFoundError):
            await book(seeded, users["mike"], start, end, vehicle_id=99)
        with pytest.raises(NotFoundError):
            await book(seeded, users["mike"], start, end, driver_id=99)

    @pytest.mark.asyncio
    async def test_vehicle_overlap_conflicts(self, seeded, users, window):
        start, end = window
        await book(seeded, users["mike"], start, end, vehicle_id=1, driver_id=1)

        with pytest.raises(ConflictError):
            await book(seeded, users["lisa"], start + timedelta(hours=1), end + timedelta(hours=1),
                       vehicle_id=1, driver_id=3)
        assert seeded.query(Booking).count() == 1

    @pytest.mark.asyncio
    async def test_driver_overlap_conflicts(self, seeded, users, window):
        start, end = window
        await book(seeded, users["mike"], start, end, vehicle_id=1, driver_id=1)

        with pytest.raises(ConflictError):
            await book(seeded, users["lisa"], start - timedelta(minutes=30), start + timedelta(minutes=30),
                       vehicle_id=3, driver_id=1)

    @pytest.mark.asyncio
    async def test_back_to_back_bookings_allowed(self, seeded, users, window):
        start, end = window
        await book(seeded, users["mike"], start, end)
        second = await book(seeded, users["lisa"], end, end + timedelta(hours=2))
        assert second.status == "pending"

    @pytest.mark.asyncio
    async def test_rejected_and_cancelled_bookings_free_the_slot(self, seeded, users, window):
        start, end = window
        first = await book(seeded, users["mike"], start, end)
        await resolve_approval(seeded, first.id, 1, users["l1"], "reject")
        second = await book(seeded, users["lisa"], start, end)
        await cancel_booking(seeded, second.id, users["lisa"])

        third = await book(seeded, users["mike"], start, end)
        assert third.status == "pending"
        assert find_overlapping_bookings(seeded, start, end, vehicle_id=1) == [third]

    @pytest.mark.asyncio
    async def test_vehicle_in_maintenance(self, seeded, users, window):
        start, end = window
        # MIN-004 bulldozer is seeded in maintenance; Robert Miller drives bulldozers
        with pytest.raises(ConflictError):
            await book(seeded, users["mike"], start, end, vehicle_id=4, driver_id=2)

    @pytest.mark.asyncio
    async def test_driver_on_leave(self, seeded, users, window):
        start, end = window
        with pytest.raises(ConflictError):
            await book(seeded, users["mike"], start, end, vehicle_id=2, driver_id=4)

    @pytest.mark.asyncio
    async def test_driver_must_be_qualified(self, seeded, users, window):
        start, end = window
        # David Thompson drives trucks/vans/cars, MIN-002 is an excavator
        with pytest.raises(ValidationError):
            await book(seeded, users["mike"], start, end, vehicle_id=2, driver_id=1)

    @pytest.mark.asyncio
    async def test_admin_books_on_behalf(self, seeded, users, window):
        start, end = window
        booking = await book(seeded, users["admin"], start, end, user_id=users["lisa"].id)
        assert booking.user_id == users["lisa"].id
        assert booking.created_by == users["admin"].id
        assert booking.department == "Maintenance"

    @pytest.mark.asyncio
    async def test_employee_cannot_book_for_others(self, seeded, users, window):
        start, end = window
        with pytest.raises(ForbiddenError):
            await book(seeded, users["mike"], start, end, user_id=users["lisa"].id)

    @pytest.mark.asyncio
    async def test_explicit_approver_must_hold_role(self, seeded, users, window):
        start, end = window
        with pytest.raises(ValidationError):
            await book(seeded, users["mike"], start, end, approver_l1_id=users["l2"].id)

    def test_no_approver_available(self, db):
        with pytest.raises(ValidationError):
            designate_approver(db, 1)


class TestUpdateBooking:
    @pytest.mark.asyncio
    async def test_owner_edits_pending_booking(self, seeded, users, window):
        start, end = window
        booking = await book(seeded, users["mike"], start, end)

        booking = await update_booking(seeded, booking.id, users["mike"], {
            "notes": "Changed plan", "end_date": end + timedelta(hours=1),
        })
        assert booking.notes == "Changed plan"
        assert booking.end_date == end + timedelta(hours=1)
        assert booking.status == "pending"
        row = seeded.query(AuditLog).filter(AuditLog.action == "UPDATE", AuditLog.entity_id == booking.id).one()
        assert row.entity_type == "booking"
        assert row.old_values["notes"] is None

    @pytest.mark.asyncio
    async def test_shifting_within_own_slot_is_not_an_overlap(self, seeded, users, window):
        start, end = window
        booking = await book(seeded, users["mike"], start, end)

        booking = await update_booking(seeded, booking.id, users["mike"], {"start_date": start + timedelta(minutes=30)})
        assert booking.start_date == start + timedelta(minutes=30)

    @pytest.mark.asyncio
    async def test_edit_into_overlap_conflicts(self, seeded, users, window):
        start, end = window
        await book(seeded, users["lisa"], start, end, vehicle_id=1, driver_id=1)
        mine = await book(seeded, users["mike"], end, end + timedelta(hours=2), vehicle_id=3, driver_id=3)

        later = start + timedelta(hours=1)
        with pytest.raises(ConflictError):
            await update_booking(seeded, mine.id, users["mike"], {"vehicle_id": 1, "start_date": later})
        with pytest.raises(ConflictError):
            await update_booking(seeded, mine.id, users["mike"], {"driver_id": 1, "start_date": later})
        seeded.expire_all()
        assert (mine.vehicle_id, mine.driver_id, mine.start_date) == (3, 3, end)

    @pytest.mark.asyncio
    async def test_owner_cannot_edit_non_pending(self, seeded, users, window):
        start, end = window
        booking = await book(seeded, users["mike"], start, end)
        await resolve_approval(seeded, booking.id, 1, users["l1"], "approve")
        await resolve_approval(seeded, booking.id, 2, users["l2"], "approve")

        with pytest.raises(InvalidStateError):
            await update_booking(seeded, booking.id, users["mike"], {"notes": "too late"})

        booking = await update_booking(seeded, booking.id, users["admin"], {"notes": "admin fix"})
        assert booking.notes == "admin fix"
        assert booking.status == "approved"

    @pytest.mark.asyncio
    async def test_rejected_booking_is_final_even_for_admin(self, seeded, users, window):
        start, end = window
        booking = await book(seeded, users["mike"], start, end)
        await resolve_approval(seeded, booking.id, 1, users["l1"], "reject")

        with pytest.raises(InvalidStateError):
            await update_booking(seeded, booking.id, users["admin"], {"notes": "revive"})

    @pytest.mark.asyncio
    async def test_other_employee_forbidden(self, seeded, users, window):
        start, end = window
        booking = await book(seeded, users["mike"], start, end)
        with pytest.raises(ForbiddenError):
            await update_booking(seeded, booking.id, users["lisa"], {"notes": "mine now"})
        with pytest.raises(ForbiddenError):
            await update_booking(seeded, booking.id, users["mike"], {"user_id": users["lisa"].id})

    @pytest.mark.asyncio
    async def test_edit_rechecks_qualification_and_dates(self, seeded, users, window):
        start, end = window
        booking = await book(seeded, users["mike"], start, end)

        with pytest.raises(ValidationError):
            await update_booking(seeded, booking.id, users["mike"], {"vehicle_id": 2})
        with pytest.raises(ValidationError):
            await update_booking(seeded, booking.id, users["mike"], {"end_date": start})
        with pytest.raises(ConflictError):
            await update_booking(seeded, booking.id, users["mike"], {"vehicle_id": 4, "driver_id": 2})

    @pytest.mark.asyncio
    async def test_no_changes_writes_nothing(self, seeded, users, window):
        start, end = window
        booking = await book(seeded, users["mike"], start, end)
        before = seeded.query(AuditLog).count()

        await update_booking(seeded, booking.id, users["mike"], {"vehicle_id": 1, "notes": None})
        assert seeded.query(AuditLog).count() == before


class TestCancelBooking:
    @pytest.mark.asyncio
    async def test_owner_cancels(self, seeded, users, window):
        start, end = window
        booking = await book(seeded, users["mike"], start, end)

        booking = await cancel_booking(seeded, booking.id, users["mike"], "Trip postponed")
        assert booking.status == "cancelled"
        assert booking.cancellation_reason == "Trip postponed"
        assert [a.status for a in booking.approvals] == ["cancelled", "cancelled"]

    @pytest.mark.asyncio
    async def test_cancel_after_level1_approval(self, seeded, users, window):
        start, end = window
        booking = await book(seeded, users["mike"], start, end)
        await resolve_approval(seeded, booking.id, 1, users["l1"], "approve")

        booking = await cancel_booking(seeded, booking.id, users["admin"])
        assert [a.status for a in booking.approvals] == ["cancelled", "cancelled"]
        assert booking.status == "cancelled"

    @pytest.mark.asyncio
    async def test_other_employee_forbidden(self, seeded, users, window):
        start, end = window
        booking = await book(seeded, users["mike"], start, end)
        with pytest.raises(ForbiddenError):
            await cancel_booking(seeded, booking.id, users["lisa"])

    @pytest.mark.asyncio
    async def test_only_pending(self, seeded, users, window):
        start, end = window
        booking = await book(seeded, users["mike"], start, end)
        await resolve_approval(seeded, booking.id, 1, users["l1"], "approve")
        await resolve_approval(seeded, booking.id, 2, users["l2"], "approve")

        with pytest.raises(InvalidStateError):
            await cancel_booking(seeded, booking.id, users["mike"])

    @pytest.mark.asyncio
    async def test_approvals_resolved_underneath_cancel(self, seeded, users, window):
        start, end = window
        booking = await book(seeded, users["mike"], start, end)
        # Another transaction resolved both approvals after the booking was loaded
        seeded.execute(text("UPDATE approvals SET status = 'rejected' WHERE booking_id = :id"), {"id": booking.id})

        with pytest.raises(InvalidStateError):
            await cancel_booking(seeded, booking.id, users["mike"])

        seeded.expire_all()
        assert booking.status == "pending"
        assert booking.cancellation_reason is None
        assert [a.status for a in booking.approvals] == ["pending", "pending"]


class TestVisibility:
    @pytest.mark.asyncio
    async def test_each_role_sees_its_bookings(self, seeded, users, window):
        start, end = window
        mine = await book(seeded, users["mike"], start, end)
        await book(seeded, users["lisa"], end, end + timedelta(hours=1))
        params = PageParams(page=1, limit=10)

        assert list_bookings(seeded, users["admin"], params)["pagination"]["total"] == 2
        assert [b.id for b in list_bookings(seeded, users["mike"], params)["items"]] == [mine.id]
        assert list_bookings(seeded, users["l1"], params)["pagination"]["total"] == 2
        assert list_bookings(seeded, users["admin"], params, user_id=users["lisa"].id)["pagination"]["total"] == 1

    @pytest.mark.asyncio
    async def test_get_booking_of_someone_else(self, seeded, users, window):
        start, end = window
        booking = await book(seeded, users["mike"], start, end)

        assert get_booking(seeded, booking.id, users["l2"]).id == booking.id
        with pytest.raises(ForbiddenError):
            get_booking(seeded, booking.id, users["lisa"])
        with pytest.raises(NotFoundError):
            get_booking(seeded, 999, users["admin"])
