"""
Bookings table. status is never written directly by request handlers;
approval_service recomputes it from the booking's two approvals.
"""

import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from vehicle_booking.database import Base


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


# Bookings that still hold their vehicle and driver for [start_date, end_date)
ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING.value, BookingStatus.APPROVED.value)


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("end_date > start_date", name="ck_bookings_date_range"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id"))
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=False, index=True)
    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=False, index=True)
    department = Column(String(100))
    notes = Column(Text)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    rejection_reason = Column(Text)
    cancellation_reason = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="bookings", foreign_keys=[user_id])
    creator = relationship("User", foreign_keys=[created_by])
    vehicle = relationship("Vehicle", back_populates="bookings")
    driver = relationship("Driver", back_populates="bookings")
    approvals = relationship(
        "Approval",
        back_populates="booking",
        order_by="Approval.level",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Booking {self.id} vehicle={self.vehicle_id} status={self.status}>"
