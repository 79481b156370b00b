"""
Feed Backend — Auth Route Handlers
====================================

What:  Placeholder authentication group mounted under /auth.
Why:   Reserves the route group for clients; no credentials are stored yet.
How:   Each route raises AuthNotImplementedError, rendered as a 501 envelope.
"""

from fastapi import APIRouter

from feed_backend.exceptions import AuthNotImplementedError
from feed_backend.schemas.post import ErrorResponse

router = APIRouter(prefix="/auth", tags=["Auth"])

_NOT_IMPLEMENTED = {501: {"description": "Not available", "model": ErrorResponse}}


@router.put("/signup", responses=_NOT_IMPLEMENTED, summary="Register a user (not available)")
async def signup() -> None:
    raise AuthNotImplementedError("signup")


@router.post("/login", responses=_NOT_IMPLEMENTED, summary="Log in (not available)")
async def login() -> None:
    raise AuthNotImplementedError("login")
