import logging
from typing import List, Optional

from fastapi import BackgroundTasks

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import ConflictError, NotFoundError
from ..core.timeutils import civil_to_utc, format_local, utcnow, wall_clock
from ..models.appointment import Appointment, AppointmentStatus, DEFAULT_AUTHOR
from ..models.user import User
from ..repositories.appointment_repository import AppointmentRepository
from ..repositories.user_repository import UserRepository
from ..schemas.appointment import AppointmentCreate, AppointmentUpdate
from .identity import ensure_can_access, is_administrator, resolve_current_user
from .notifier import WhatsAppNotifier

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Agendamento cancelado"


async def deliver_notification(notifier: WhatsAppNotifier, message: str) -> None:
    """Background task body: send and log, never raise."""
    try:
        await notifier.send(message)
    except Exception:
        logger.exception("Unexpected error while sending WhatsApp notification")


class AppointmentService:
    """Booking rules on top of the appointment store.

    Notifications are queued on ``tasks`` and run after the response is
    sent, so their outcome never affects the operation result.
    """

    def __init__(
        self,
        appointments: AppointmentRepository,
        users: UserRepository,
        notifier: WhatsAppNotifier,
        tasks: BackgroundTasks,
        config: Settings = default_settings,
    ):
        self.appointments = appointments
        self.users = users
        self.notifier = notifier
        self.tasks = tasks
        self.config = config

    def create_appointment(self, data: AppointmentCreate, principal_id: Optional[int]) -> Appointment:
        """Book a new appointment.

        Non-administrators are limited to one future appointment. The check
        looks at the acting user's bookings, not the target username.
        """
        user = resolve_current_user(self.users, principal_id)

        # Check-then-insert without a lock: concurrent requests from the same
        # user can both pass this check.
        if not is_administrator(user):
            existing = self.appointments.find_from(user.username, utcnow())
            if existing:
                logger.warning(
                    f"User {user.username} already has future appointment {existing.id}"
                )
                raise ConflictError(
                    "Você já tem um agendamento futuro. "
                    "Cancele ou remarque o atual antes de agendar outro."
                )

        date_time = civil_to_utc(data.date_time)
        username = data.username or user.username

        appointment = self.appointments.create(
            username=username,
            author=data.author or DEFAULT_AUTHOR,
            service_type=data.service_type,
            date_time=date_time,
            status=AppointmentStatus.SCHEDULED,
        )
        logger.info(
            f"Appointment {appointment.id} created for {username} by {user.username}"
        )

        self._notify(
            "Novo agendamento confirmado:\n"
            f"Usuário: {username}\n"
            f"Serviço: {data.service_type}\n"
            f"Data e Hora: {format_local(date_time)}h"
        )
        return appointment

    def list_appointments(self, principal_id: Optional[int], username: Optional[str] = None) -> List[Appointment]:
        user = resolve_current_user(self.users, principal_id)

        if is_administrator(user):
            if username:
                return self.appointments.list_by_username(username)
            return self.appointments.list_all()

        # Ordinary users only ever see their own upcoming bookings
        return self.appointments.list_from(user.username, utcnow())

    def get_appointment(self, appointment_id: int, principal_id: Optional[int]) -> Appointment:
        appointment, _ = self._load_for_caller(appointment_id, principal_id)
        return appointment

    def reschedule_appointment(
        self, appointment_id: int, data: AppointmentUpdate, principal_id: Optional[int]
    ) -> Appointment:
        """Change service and date/time. Does not re-check the future-booking limit."""
        appointment, user = self._load_for_caller(appointment_id, principal_id)

        adjusted = civil_to_utc(data.date_time)
        if self.config.NORMALIZE_RESCHEDULE_DATETIME:
            stored = adjusted
        else:
            # Legacy behaviour: wall-clock digits are stored unconverted
            stored = wall_clock(data.date_time)

        appointment = self.appointments.update(
            appointment,
            service_type=data.service_type,
            date_time=stored,
        )
        logger.info(f"Appointment {appointment.id} rescheduled by {user.username}")

        self._notify(
            f"O agendamento de {user.username} foi remarcado:\n"
            f"Novo Serviço: {data.service_type}\n"
            f"Nova Data e Hora: {format_local(adjusted)}h"
        )
        return appointment

    def cancel_appointment(self, appointment_id: int, principal_id: Optional[int]) -> str:
        """Permanently delete the appointment."""
        appointment, user = self._load_for_caller(appointment_id, principal_id)

        service_type = appointment.service_type
        when = format_local(appointment.date_time)
        self.appointments.delete(appointment)
        logger.info(f"Appointment {appointment_id} cancelled by {user.username}")

        self._notify(
            f"O agendamento de {user.username} para o serviço de {service_type} "
            f"em {when} foi cancelado."
        )
        return CANCELLED_MESSAGE

    def list_usernames(self) -> List[str]:
        return self.users.list_usernames()

    def rollback(self) -> None:
        self.appointments.rollback()

    def _load_for_caller(self, appointment_id: int, principal_id: Optional[int]) -> tuple[Appointment, User]:
        appointment = self.appointments.get_by_id(appointment_id)
        if not appointment:
            raise NotFoundError("Agendamento não encontrado")

        user = resolve_current_user(self.users, principal_id)
        ensure_can_access(user, appointment)
        return appointment, user

    def _notify(self, message: str) -> None:
        self.tasks.add_task(deliver_notification, self.notifier, message)
