from contextlib import contextmanager
from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional
import logging

from ...api.deps import get_appointment_service, get_current_user_token
from ...core.exceptions import UnexpectedError
from ...core.security import TokenPayload
from ...schemas.appointment import (
    AppointmentCreate, AppointmentCreated, AppointmentResponse,
    AppointmentUpdate, UserDirectoryEntry
)
from ...services.appointment_service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@contextmanager
def store_errors(service: AppointmentService, message: str):
    """Turn database failures into a generic 500 with ``message``."""
    try:
        yield
    except SQLAlchemyError:
        logger.exception(message)
        service.rollback()
        raise UnexpectedError(message)

@router.post("", response_model=AppointmentCreated, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    data: AppointmentCreate,
    token: TokenPayload = Depends(get_current_user_token),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Book an appointment."""
    with store_errors(service, "Erro ao criar agendamento"):
        appointment = service.create_appointment(data, token.user_id)

    return AppointmentCreated(
        message="Agendamento criado com sucesso",
        appointment=AppointmentResponse.from_model(appointment)
    )

@router.get("", response_model=List[AppointmentResponse])
async def list_appointments(
    username: Optional[str] = None,
    token: TokenPayload = Depends(get_current_user_token),
    service: AppointmentService = Depends(get_appointment_service)
):
    """All appointments for administrators (optionally by username), upcoming own ones otherwise."""
    with store_errors(service, "Erro ao buscar agendamentos"):
        appointments = service.list_appointments(token.user_id, username)

    return [AppointmentResponse.from_model(a) for a in appointments]

@router.get("/users", response_model=List[UserDirectoryEntry])
async def list_users(
    service: AppointmentService = Depends(get_appointment_service)
):
    """Usernames for the "book on behalf of" selector. No authentication."""
    with store_errors(service, "Erro ao buscar usuários"):
        usernames = service.list_usernames()

    return [UserDirectoryEntry(username=name) for name in usernames]

@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    token: TokenPayload = Depends(get_current_user_token),
    service: AppointmentService = Depends(get_appointment_service)
):
    with store_errors(service, "Erro ao buscar o agendamento"):
        appointment = service.get_appointment(appointment_id, token.user_id)

    return AppointmentResponse.from_model(appointment)

@router.put("/{appointment_id}", response_model=AppointmentResponse)
async def reschedule_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    token: TokenPayload = Depends(get_current_user_token),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Change the service type and date/time of an appointment."""
    with store_errors(service, "Erro ao atualizar agendamento"):
        appointment = service.reschedule_appointment(appointment_id, data, token.user_id)

    return AppointmentResponse.from_model(appointment)

@router.delete("/{appointment_id}", response_class=PlainTextResponse)
async def cancel_appointment(
    appointment_id: int,
    token: TokenPayload = Depends(get_current_user_token),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Cancel (permanently delete) an appointment."""
    with store_errors(service, "Erro ao cancelar agendamento"):
        confirmation = service.cancel_appointment(appointment_id, token.user_id)

    return PlainTextResponse(confirmation)
