"""Appointment repository - Database operations for appointments"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..models.appointment import Appointment


class AppointmentRepository:
    """Repository for appointment database operations"""

    def __init__(self, db: Session):
        self.db = db

    def _ordered(self, query):
        return query.order_by(Appointment.date_time.asc(), Appointment.id.asc())

    def get_by_id(self, appointment_id: int) -> Optional[Appointment]:
        return self.db.query(Appointment).filter(Appointment.id == appointment_id).first()

    def list_all(self) -> list[Appointment]:
        return self._ordered(self.db.query(Appointment)).all()

    def list_by_username(self, username: str) -> list[Appointment]:
        query = self.db.query(Appointment).filter(Appointment.username == username)
        return self._ordered(query).all()

    def list_from(self, username: str, start: datetime) -> list[Appointment]:
        """Appointments owned by ``username`` at or after ``start``."""
        query = self.db.query(Appointment).filter(
            Appointment.username == username,
            Appointment.date_time >= start,
        )
        return self._ordered(query).all()

    def find_from(self, username: str, start: datetime) -> Optional[Appointment]:
        return (
            self.db.query(Appointment)
            .filter(Appointment.username == username, Appointment.date_time >= start)
            .first()
        )

    def create(self, **appointment_data) -> Appointment:
        appointment = Appointment(**appointment_data)
        self.db.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)
        return appointment

    def update(self, appointment: Appointment, **updates) -> Appointment:
        for key, value in updates.items():
            setattr(appointment, key, value)

        self.db.commit()
        self.db.refresh(appointment)
        return appointment

    def delete(self, appointment: Appointment) -> None:
        self.db.delete(appointment)
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
