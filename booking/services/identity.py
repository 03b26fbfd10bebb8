import logging
from typing import Optional

from ..core.exceptions import ForbiddenError, NotFoundError
from ..models.appointment import Appointment
from ..models.user import User
from ..repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

# Administrators are recognised by username only; there is no role column.
ADMIN_USERNAMES = frozenset({"admin", "root"})


def is_administrator(user: User) -> bool:
    return user.username in ADMIN_USERNAMES


def resolve_current_user(users: UserRepository, principal_id: Optional[int]) -> User:
    """Map an authenticated principal to its user record."""
    user = users.get_by_id(principal_id) if principal_id is not None else None
    if not user:
        raise NotFoundError("Usuário não encontrado")
    return user


def ensure_can_access(user: User, appointment: Appointment) -> None:
    """Allow administrators and the appointment owner, deny everyone else."""
    if is_administrator(user) or appointment.username == user.username:
        return
    logger.warning(
        f"User {user.username} denied access to appointment {appointment.id} "
        f"owned by {appointment.username}"
    )
    raise ForbiddenError("Acesso negado")
