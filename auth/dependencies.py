from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer

from auth.sessions import AdminSession, session_manager
from core.errors import UpstreamError, to_http_exception


async def get_bearer_token(request: Request) -> Optional[str]:
    credentials = await HTTPBearer(auto_error=False)(request)
    return credentials.credentials if credentials else None


async def get_optional_session(request: Request, token: Optional[str] = Depends(get_bearer_token)) -> Optional[AdminSession]:
    """Current admin session, or None; never fails on a missing token."""
    try:
        return await session_manager.get_current_session(request.app.mongodb, token)
    except UpstreamError as exc:
        raise to_http_exception(exc)


async def require_admin_session(session: Optional[AdminSession] = Depends(get_optional_session)) -> AdminSession:
    if session is None:
        raise HTTPException(status_code=401, detail="Admin session required. Please sign in.")
    return session
