"""
Optional client key authentication dependency.

The mobile client calls the analysis endpoint directly. When
KETOMETER_API_KEY is configured, every analysis call must carry it:

  - Client sends header: X-Ketometer-Key: <KETOMETER_API_KEY>
  - Service checks it matches the env var
  - Returns 403 if missing or wrong

When KETOMETER_API_KEY is empty the service trusts its caller.

Generate a key with: python -c "import secrets; print(secrets.token_hex(32))"
"""
from fastapi import Header, HTTPException
from typing import Annotated

from ketometer.core.config import settings


def verify_client_key(x_ketometer_key: Annotated[str, Header()] = "") -> None:
    """FastAPI dependency: validates the shared client key header."""
    if not settings.KETOMETER_API_KEY:
        return
    if x_ketometer_key != settings.KETOMETER_API_KEY:
        raise HTTPException(
            status_code=403,
            detail="Forbidden: invalid or missing client key"
        )
