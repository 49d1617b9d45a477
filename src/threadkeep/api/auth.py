"""
Owner authentication for API endpoints.

Maps the bearer token of a request to the owner identity that scopes every
read and write. Two token kinds are accepted:

- ``anon_<deviceId>``: an anonymous extension install, identified by its
  device id (at least 32 characters).
- A signed JWT issued for a registered account, carrying ``id`` and
  ``email`` claims.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional

import jwt
from fastapi import Header, HTTPException, status

from threadkeep.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OwnerIdentity:
    """
    Authenticated owner of the current request.

    Attributes:
        id: Registered user id or anonymous device id
        email: Account email (None for anonymous devices)
        is_anonymous: True for ``anon_`` device tokens
    """

    id: str
    email: Optional[str] = None
    is_anonymous: bool = False


def create_access_token(
    owner_id: str,
    email: Optional[str] = None,
    expires_in: Optional[timedelta] = None,
) -> str:
    """
    Issue a signed token for a registered owner.

    Args:
        owner_id: User id to embed as the ``id`` claim
        email: Optional email claim
        expires_in: Token lifetime (defaults to JWT_EXPIRE_DAYS)

    Returns:
        Encoded JWT
    """
    lifetime = expires_in or timedelta(days=settings.jwt_expire_days)
    claims = {
        "id": owner_id,
        "email": email,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> Optional[OwnerIdentity]:
    """
    Resolve a bearer token to an owner identity.

    Args:
        token: Raw token (without the ``Bearer `` prefix)

    Returns:
        OwnerIdentity, or None if the token is not acceptable
    """
    prefix = settings.anonymous_token_prefix
    if token.startswith(prefix):
        device_id = token[len(prefix):]
        if len(device_id) >= settings.anonymous_device_id_min_length:
            return OwnerIdentity(id=device_id, email=None, is_anonymous=True)
        return None

    try:
        claims = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except jwt.PyJWTError as e:
        logger.debug(f"Rejected bearer token: {e}")
        return None

    owner_id = claims.get("id")
    if not owner_id:
        return None

    return OwnerIdentity(id=str(owner_id), email=claims.get("email"))


def get_current_owner(
    authorization: Annotated[Optional[str], Header()] = None,
) -> OwnerIdentity:
    """
    FastAPI dependency that authenticates the request owner.

    Args:
        authorization: ``Authorization`` header value

    Returns:
        OwnerIdentity for the request

    Raises:
        HTTPException(401): If the header is missing, malformed or invalid
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    owner = verify_token(authorization[7:])  # Remove "Bearer " prefix
    if owner is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return owner
