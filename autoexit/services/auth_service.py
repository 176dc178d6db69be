from typing import Optional

import requests
from fastapi import Header, HTTPException

from autoexit.config import AUTH_URL, AUTH_SERVICE_KEY, REQUEST_TIMEOUT
from autoexit.services.exceptions import AuthenticationError
from autoexit.utils.logging import setup_logging

logger = setup_logging()


def get_user_id_from_token(token: str, timeout: float = REQUEST_TIMEOUT) -> str:
    """
    Resolve a bearer token to the owning user id through the auth service
    """
    if not token:
        raise AuthenticationError("Missing token")

    try:
        response = requests.get(
            f"{AUTH_URL.rstrip('/')}/auth/v1/user",
            headers={"Authorization": f"Bearer {token}", "apikey": AUTH_SERVICE_KEY},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise AuthenticationError(f"Auth service unavailable: {e}") from e

    if not response.ok:
        raise AuthenticationError(f"Auth service rejected token: HTTP {response.status_code}")

    try:
        user = response.json()
    except ValueError as e:
        raise AuthenticationError("Auth service returned invalid JSON") from e

    user_id = user.get("id") if isinstance(user, dict) else None
    if not user_id:
        raise AuthenticationError("No user found for token")
    return str(user_id)


# Dependency
def get_current_user(authorization: Optional[str] = Header(None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        return get_user_id_from_token(authorization[len("Bearer "):].strip())
    except AuthenticationError as e:
        logger.error(f"Auth error: {e}")
        raise HTTPException(status_code=401, detail="Invalid token")
