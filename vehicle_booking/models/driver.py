"""
Drivers table. vehicle_types holds the list of vehicle types a driver is
licensed for; an empty list means no restriction.
"""

import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.orm import relationship
from vehicle_booking.database import Base


class DriverStatus(str, enum.Enum):
    AVAILABLE = "available"
    ASSIGNED = "assigned"
    ON_LEAVE = "on_leave"
    INACTIVE = "inactive"


UNBOOKABLE_DRIVER_STATUSES = {DriverStatus.ON_LEAVE.value, DriverStatus.INACTIVE.value}


class Driver(Base):
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    license_number = Column(String(50), unique=True, nullable=False, index=True)
    license_expiry = Column(DateTime)
    phone = Column(String(20))
    email = Column(String(255))
    status = Column(String(20), nullable=False, default=DriverStatus.AVAILABLE.value)
    experience_years = Column(Integer, default=0)
    vehicle_types = Column(JSON, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    bookings = relationship("Booking", back_populates="driver")

    def can_drive(self, vehicle_type: str) -> bool:
        return not self.vehicle_types or vehicle_type in self.vehicle_types

    def __repr__(self):
        return f"<Driver {self.id} {self.name} license={self.license_number}>"
