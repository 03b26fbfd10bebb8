from fastapi import BackgroundTasks, Depends, HTTPException, status, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.database import get_db, get_redis
from ..core.security import security, verify_token, AuthenticationError, TokenPayload
from ..models.user import User
from ..repositories.appointment_repository import AppointmentRepository
from ..repositories.user_repository import UserRepository
from ..services.appointment_service import AppointmentService
from ..services.notifier import WhatsAppNotifier

_notifier = WhatsAppNotifier(settings)

async def get_current_user_token(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> TokenPayload:
    """Extract and verify JWT token from Authorization header."""
    token = credentials.credentials

    # Verify token
    token_payload = verify_token(token)
    if not token_payload:
        raise AuthenticationError("Invalid or expired token")

    # Check if token is access token
    if token_payload.token_type != "access":
        raise AuthenticationError("Invalid token type")

    if token_payload.user_id is None:
        raise AuthenticationError("Invalid token payload")

    return token_payload

async def get_current_user(
    token_payload: TokenPayload = Depends(get_current_user_token),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user from database."""
    user = UserRepository(db).get_by_id(token_payload.user_id)
    if not user:
        raise AuthenticationError("User not found")
    return user

def get_notifier() -> WhatsAppNotifier:
    """Get the admin-channel notifier."""
    return _notifier

def get_appointment_service(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: WhatsAppNotifier = Depends(get_notifier),
) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(
        AppointmentRepository(db),
        UserRepository(db),
        notifier,
        background_tasks,
    )

# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis)
) -> None:
    """Basic rate limiting for authentication endpoints."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{client_ip}"

    current_requests = redis_client.get(key)
    if current_requests is None:
        redis_client.setex(key, settings.RATE_LIMIT_WINDOW_SECONDS, 1)
    else:
        if int(current_requests) >= settings.RATE_LIMIT_REQUESTS:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later."
            )
        redis_client.incr(key)
