"""Mock login/logout. No credentials are checked or stored."""

import logging

from fastapi import HTTPException
from fastapi.responses import RedirectResponse

LOGGER = logging.getLogger(__name__)


async def login(email: str, password: str) -> RedirectResponse:
    """Redirect to the dashboard when both fields are filled in."""
    if not email.strip() or not password:
        raise HTTPException(status_code=400, detail="Please enter email and password.")
    LOGGER.info("Mock login for %s", email)
    return RedirectResponse(url="/dashboard", status_code=303)


async def logout() -> RedirectResponse:
    LOGGER.info("Mock logout")
    return RedirectResponse(url="/login", status_code=303)
