"""
Approvals table: exactly two rows per booking, one per level.
The (booking_id, level) unique constraint and the level check keep the
pair structurally fixed; ApprovalChain is the in-code view of that pair.
"""

import enum
from datetime import datetime
from typing import NamedTuple
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship
from vehicle_booking.database import Base


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


APPROVAL_LEVELS = (1, 2)


class Approval(Base):
    __tablename__ = "approvals"
    __table_args__ = (
        UniqueConstraint("booking_id", "level", name="uq_approvals_booking_level"),
        CheckConstraint("level IN (1, 2)", name="ck_approvals_level"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    approver_id = Column(Integer, ForeignKey("users.id"))
    level = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=ApprovalStatus.PENDING.value, index=True)
    comments = Column(Text)
    decided_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    booking = relationship("Booking", back_populates="approvals")
    approver = relationship("User")

    def __repr__(self):
        return f"<Approval {self.id} booking={self.booking_id} level={self.level} status={self.status}>"


class ApprovalChain(NamedTuple):
    """The ordered level-1 / level-2 pair belonging to one booking."""

    level1: Approval
    level2: Approval

    @classmethod
    def from_approvals(cls, approvals) -> "ApprovalChain":
        by_level = {}
        for approval in approvals:
            if approval.level in by_level or approval.level not in APPROVAL_LEVELS:
                raise ValueError(f"Unexpected approval level {approval.level}")
            by_level[approval.level] = approval
        if set(by_level) != set(APPROVAL_LEVELS):
            raise ValueError(f"Booking must have approvals for levels {APPROVAL_LEVELS}, got {sorted(by_level)}")
        return cls(by_level[1], by_level[2])

    def at(self, level: int) -> Approval:
        return self.level1 if level == 1 else self.level2
