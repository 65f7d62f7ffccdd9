"""
Audit log table: one row per state-changing action (bookings, approvals,
vehicles, drivers, users, logins). Written by audit_service only.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, ForeignKey
from sqlalchemy.orm import relationship
from vehicle_booking.database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True)
    action = Column(String(20), nullable=False, index=True)       # CREATE | UPDATE | CANCEL | LOGIN | LOGOUT
    entity_type = Column(String(50), nullable=False, index=True)  # booking | approval | vehicle | driver | user
    entity_id = Column(Integer)
    old_values = Column(JSON)
    new_values = Column(JSON)
    description = Column(Text)
    created_at = Column(DateTime, nullable=False, index=True)

    user = relationship("User")

    def __repr__(self):
        return f"<AuditLog {self.id} {self.action} {self.entity_type}:{self.entity_id}>"
