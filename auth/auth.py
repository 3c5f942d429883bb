from fastapi import APIRouter, Depends, Request
from typing import Optional

from auth.dependencies import get_bearer_token, get_optional_session
from auth.sessions import AdminSession, session_manager
from core.errors import BookingError, to_http_exception
from models.user import AdminLogin

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/sign-in", response_model=AdminSession)
async def sign_in(credentials: AdminLogin, request: Request):
    try:
        return await session_manager.sign_in(request.app.mongodb, credentials.email, credentials.password)
    except BookingError as exc:
        raise to_http_exception(exc)


@router.post("/sign-out")
async def sign_out(request: Request, token: Optional[str] = Depends(get_bearer_token)):
    try:
        await session_manager.sign_out(request.app.mongodb, token)
    except BookingError as exc:
        raise to_http_exception(exc)
    return {"message": "Signed out"}


@router.get("/session", response_model=Optional[AdminSession])
async def get_session(session: Optional[AdminSession] = Depends(get_optional_session)):
    """Returns the current admin session, or null when signed out."""
    return session
