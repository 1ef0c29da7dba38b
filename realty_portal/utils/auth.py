"""
Authentication utilities for JWT token management.
Signs access tokens carrying the identity summary and verifies them without
touching the database.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from realty_portal.config import settings
from realty_portal.models.user import UserRole
import logging

logger = logging.getLogger(__name__)


class TokenPayload:
    """Identity carried by a verified access token."""

    def __init__(self, user_id: int, email: str, name: str, role: UserRole, exp: datetime):
        self.user_id = user_id
        self.email = email
        self.name = name
        self.role = role
        self.exp = exp

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenPayload":
        """Create TokenPayload from decoded claims."""
        return cls(
            user_id=int(data["sub"]),
            email=data["email"],
            name=data.get("name", ""),
            role=UserRole(data["role"]),
            exp=datetime.fromtimestamp(data["exp"], tz=timezone.utc)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.user_id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
        }


def create_access_token(
    user_id: int,
    email: str,
    full_name: str,
    role: UserRole,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create JWT access token with user claims.

    Args:
        user_id: User's ID
        email: User's email address
        full_name: Display name
        role: User's role (agent/admin)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        "sub": str(user_id),
        "email": email,
        "name": full_name,
        "role": role.value,
        "exp": now + expires_delta,
        "iat": now,
        "type": "access"
    }

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def verify_token(token: Optional[str]) -> Optional[TokenPayload]:
    """
    Verify and decode a JWT access token.

    Returns None for anything that is not a valid, unexpired access token
    signed with our secret. Callers treat None as unauthenticated.
    """
    if not token:
        return None

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm]
        )
    except JWTError as e:
        logger.debug(f"Token rejected: {e}")
        return None

    if payload.get("type") != "access":
        logger.debug("Token rejected: wrong token type")
        return None

    try:
        return TokenPayload.from_dict(payload)
    except (KeyError, TypeError, ValueError) as e:
        logger.debug(f"Token rejected: invalid payload ({e})")
        return None


def extract_token_from_header(authorization: Optional[str]) -> Optional[str]:
    """
    Extract the bearer token from an Authorization header value.

    Returns None when the header is absent or not a bearer credential.
    """
    if not authorization:
        return None

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]
