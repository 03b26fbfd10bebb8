from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional

from ..core.timeutils import civil_to_utc, to_iso_utc, wall_clock
from ..models.appointment import Appointment


class _ScheduleFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    service_type: str = Field(..., alias="serviceType", min_length=1, max_length=255)
    date_time: str = Field(..., alias="dateTime", description="Civil date/time, e.g. 2025-03-10 14:00")

    @field_validator("service_type")
    @classmethod
    def service_type_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("serviceType must not be blank")
        return v.strip()

    @field_validator("date_time")
    @classmethod
    def date_time_parses(cls, v: str) -> str:
        try:
            civil_to_utc(v)
            wall_clock(v)
        except (ValueError, OverflowError):
            raise ValueError("dateTime must be an ISO-8601 date/time")
        return v.strip()


class AppointmentCreate(_ScheduleFields):
    username: Optional[str] = Field(None, min_length=1, max_length=100)
    author: Optional[str] = Field(None, max_length=100)


class AppointmentUpdate(_ScheduleFields):
    pass


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    username: str
    author: str
    service_type: str = Field(..., alias="serviceType")
    date_time: str = Field(..., alias="dateTime")
    status: str

    @classmethod
    def from_model(cls, appointment: Appointment) -> "AppointmentResponse":
        return cls(
            id=appointment.id,
            username=appointment.username,
            author=appointment.author,
            service_type=appointment.service_type,
            date_time=to_iso_utc(appointment.date_time),
            status=getattr(appointment.status, "value", appointment.status),
        )


class AppointmentCreated(BaseModel):
    message: str
    appointment: AppointmentResponse


class UserDirectoryEntry(BaseModel):
    username: str
