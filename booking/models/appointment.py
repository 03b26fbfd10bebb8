from sqlalchemy import Column, Integer, String, DateTime, Enum as SQLEnum
from sqlalchemy.sql import func
import enum

from ..core.database import Base

DEFAULT_AUTHOR = "administrador"

class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)

    # Owner is referenced by username, not by user id
    username = Column(String(100), nullable=False, index=True)
    author = Column(String(100), nullable=False, default=DEFAULT_AUTHOR)

    # Appointment details
    service_type = Column(String(255), nullable=False)
    date_time = Column(DateTime, nullable=False, index=True)  # naive UTC
    status = Column(
        SQLEnum(AppointmentStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AppointmentStatus.SCHEDULED,
    )

    # Tracking
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Appointment(id={self.id}, username='{self.username}', date='{self.date_time}')>"
