"""
Receipegram Core Dependencies
FastAPI dependencies for authentication and pagination
"""

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional, Annotated
import logging

from core.config import settings
from core.exceptions import AuthError, ValidationError
from services.auth_service import auth_service, AuthenticationError, Identity
from utils.request_utils import get_client_ip

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)


async def identify_required(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Identity:
    """
    Get the caller's identity from the bearer token

    Fails closed: a missing or unverifiable token raises AuthError (401).
    """
    if not credentials or not credentials.credentials:
        raise AuthError("Access token required")

    try:
        identity = auth_service.verify_token(credentials.credentials)
    except AuthenticationError as e:
        logger.warning(f"Authentication failed: {str(e)}", extra={
            "ip": get_client_ip(request),
            "path": request.url.path,
        })
        raise AuthError("Invalid or expired token")

    request.state.user_id = identity.id
    return identity


async def identify_optional(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Optional[Identity]:
    """
    Get the caller's identity if a valid token is present, None otherwise

    Fails open: read endpoints degrade to the anonymous view on any
    verification error instead of rejecting the request.
    """
    if not credentials or not credentials.credentials:
        return None

    try:
        identity = auth_service.verify_token(credentials.credentials)
    except AuthenticationError as e:
        logger.debug(f"Optional authentication failed: {str(e)}")
        return None

    request.state.user_id = identity.id
    return identity


async def get_pagination_params(page: int = 1, limit: Optional[int] = None) -> dict:
    """
    Get pagination parameters with validation

    Returns:
        Dictionary with offset, limit, page
    """
    if limit is None:
        limit = settings.DEFAULT_PAGE_SIZE

    if page < 1:
        raise ValidationError("Page must be greater than 0")

    if limit < 1:
        raise ValidationError("Limit must be greater than 0")

    if limit > settings.MAX_PAGE_SIZE:
        raise ValidationError(f"Limit cannot exceed {settings.MAX_PAGE_SIZE}")

    return {
        "offset": (page - 1) * limit,
        "limit": limit,
        "page": page
    }


# Type aliases for common dependencies
CurrentUser = Annotated[Identity, Depends(identify_required)]
OptionalUser = Annotated[Optional[Identity], Depends(identify_optional)]
PaginationParams = Annotated[dict, Depends(get_pagination_params)]
