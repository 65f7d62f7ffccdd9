"""
Vehicles table: the bookable fleet, keyed by plate number.
"""

import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from vehicle_booking.database import Base


class VehicleType(str, enum.Enum):
    TRUCK = "truck"
    VAN = "van"
    CAR = "car"
    BUS = "bus"
    EXCAVATOR = "excavator"
    BULLDOZER = "bulldozer"
    CRANE = "crane"
    OTHER = "other"


class FuelType(str, enum.Enum):
    PETROL = "petrol"
    DIESEL = "diesel"
    ELECTRIC = "electric"
    HYBRID = "hybrid"


class VehicleStatus(str, enum.Enum):
    AVAILABLE = "available"
    IN_USE = "in_use"
    MAINTENANCE = "maintenance"
    OUT_OF_SERVICE = "out_of_service"


# Vehicles in these states cannot take new bookings
UNBOOKABLE_VEHICLE_STATUSES = {VehicleStatus.MAINTENANCE.value, VehicleStatus.OUT_OF_SERVICE.value}


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    plate_number = Column(String(20), unique=True, nullable=False, index=True)
    type = Column(String(20), nullable=False)
    make = Column(String(50))
    model = Column(String(50))
    year = Column(Integer)
    capacity = Column(String(50))            # free text: "3.5 tons", "8 passengers"
    fuel_type = Column(String(20), nullable=False, default=FuelType.DIESEL.value)
    status = Column(String(20), nullable=False, default=VehicleStatus.AVAILABLE.value, index=True)
    mileage = Column(Integer, default=0)
    location = Column(String(100))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    bookings = relationship("Booking", back_populates="vehicle")

    def __repr__(self):
        return f"<Vehicle {self.plate_number} type={self.type} status={self.status}>"
