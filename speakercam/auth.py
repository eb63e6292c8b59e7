"""
Optional API key check for the session endpoints.

Health endpoints stay open so orchestrators can probe the service without
credentials.
"""

import hmac
import logging
from typing import Optional

from fastapi import Header, HTTPException, status

from speakercam.config import get_settings

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-SpeakerCam-API-Key"


def _reject(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": API_KEY_HEADER},
    )


async def verify_api_key(
    api_key: Optional[str] = Header(None, alias=API_KEY_HEADER),
) -> None:
    """
    Require the configured API key on the request.

    Without API_KEY in the environment every request is let through, which is
    the development setup.

    Raises:
        HTTPException: 401 if the header is missing or does not match
    """
    expected_key = get_settings().api_key
    if not expected_key:
        return

    if not api_key:
        logger.warning(f"Request without {API_KEY_HEADER} header rejected")
        raise _reject("Missing API key")

    if not hmac.compare_digest(api_key.encode(), expected_key.encode()):
        logger.warning("Request with invalid API key rejected")
        raise _reject("Invalid API key")
