# ============================================================================
# FILE: app/api/dependencies.py
# Authentication and service dependencies
# ============================================================================
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.config.settings import settings
from app.models.provider import Provider, UserRole
from app.services.booking.booking_service import BookingService
from app.services.notification.notification_service import LocalBroadcaster
from app.services.provider.provider_service import ProviderService

# ============================================================================
# Security Schemes
# ============================================================================

jwt_security = HTTPBearer(
    scheme_name="JWT Bearer Token",
    description="Enter your JWT access token"
)


@dataclass(frozen=True)
class CurrentUser:
    """Identity handed to the core by the auth collaborator"""
    user_id: UUID
    role: UserRole

    @property
    def is_provider(self) -> bool:
        return self.role == UserRole.PROVIDER


# ============================================================================
# JWT Token Functions
# ============================================================================

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary with claims (should include 'sub' with user_id and 'role')
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.update({
        "exp": expire,
        "iat": datetime.now(timezone.utc),
        "type": "access"
    })

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )


def verify_access_token(token: str) -> dict:
    """
    Verify and decode a JWT access token.

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Could not validate credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload


def user_from_token(token: str) -> CurrentUser:
    """Build the caller identity from a verified access token."""
    payload = verify_access_token(token)

    try:
        user_id = UUID(payload.get("sub") or "")
        role = UserRole(payload.get("role", UserRole.CLIENT.value))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid subject or role in token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return CurrentUser(user_id=user_id, role=role)


# ============================================================================
# Authentication Dependencies
# ============================================================================

async def get_current_user(
        credentials: HTTPAuthorizationCredentials = Depends(jwt_security),
) -> CurrentUser:
    """
    Dependency to get the current caller from the JWT access token.

    Usage in routes:
        @router.get("/appointments")
        def list_appointments(current_user: CurrentUser = Depends(get_current_user)):
            ...

    Raises:
        HTTPException 401: If token is invalid
    """
    return user_from_token(credentials.credentials)


async def require_provider_role(
        current_user: CurrentUser = Depends(get_current_user)
) -> CurrentUser:
    if not current_user.is_provider:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only providers can perform this action"
        )
    return current_user


def get_current_provider(
        current_user: CurrentUser = Depends(require_provider_role),
        db: Session = Depends(get_db)
) -> Provider:
    """Provider profile of the calling provider user."""
    provider = ProviderService.get_by_user(db, current_user.user_id)
    if provider is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Provider profile not found; create it first"
        )
    return provider


# ============================================================================
# Booking engine wiring
# ============================================================================

def get_notifier(request: Request) -> LocalBroadcaster:
    """Process-wide notifier created in the application lifespan."""
    notifier = getattr(request.app.state, "notifier", None)
    if notifier is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification transport not initialised"
        )
    return notifier


def get_booking_service(
        db: Session = Depends(get_db),
        notifier: LocalBroadcaster = Depends(get_notifier)
) -> BookingService:
    return BookingService(db, notifier)
