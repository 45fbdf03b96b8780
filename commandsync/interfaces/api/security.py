# commandsync/interfaces/api/security.py
"""API security for a service that edits files in the user's home.

Without API_AUTH_KEY the API answers loopback clients only. Setting a key
opens it to any client presenting the matching X-API-Key header.
"""

import ipaddress
import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader
from slowapi import Limiter
from slowapi.util import get_remote_address

from commandsync.config import settings

LOCAL_ONLY = "local_only"

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

limiter = Limiter(key_func=get_remote_address)


def is_loopback(host: str | None) -> bool:
    """Check whether a client host is this machine.

    Examples:
        >>> is_loopback("127.0.0.1"), is_loopback("::1"), is_loopback("10.0.0.5")
        (True, True, False)
    """
    if host is None or host == "localhost":
        return True
    try:
        return ipaddress.ip_address(host).is_loopback
    except ValueError:
        return False


def verify_api_key(
    request: Request, api_key: Annotated[str | None, Depends(api_key_header)]
) -> str:
    """Authorize a request against the configured access posture.

    Args:
        request: Incoming request, used for the client address.
        api_key: API key from header.

    Returns:
        The validated key, or LOCAL_ONLY for a keyless loopback request.

    Raises:
        HTTPException: 403 for a remote client when no key is configured,
            401 if the key is missing, 403 if it is wrong.
    """
    if not settings.api_auth_key:
        client_host = request.client.host if request.client else None
        if not is_loopback(client_host):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Remote access requires API_AUTH_KEY to be configured.",
            )
        return LOCAL_ONLY

    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key. Include X-API-Key header.",
        )

    if not secrets.compare_digest(api_key, settings.api_auth_key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key.",
        )

    return api_key


def get_rate_limit_string() -> str:
    return f"{settings.api_rate_limit}/minute"
