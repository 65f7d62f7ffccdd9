# Vehicle Booking: Database Models
# Import all models here for SQLAlchemy discovery

from vehicle_booking.models.user import User                     # noqa
from vehicle_booking.models.vehicle import Vehicle               # noqa
from vehicle_booking.models.driver import Driver                 # noqa
from vehicle_booking.models.booking import Booking               # noqa
from vehicle_booking.models.approval import Approval             # noqa
from vehicle_booking.models.audit_log import AuditLog            # noqa
