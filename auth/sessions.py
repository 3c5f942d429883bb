"""
Admin session collaborator: sign in, sign out, current session and change
notifications. The admin dashboard is gated on a session being present.
"""

import logging
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional

from bson import ObjectId
from pydantic import BaseModel
from pymongo.errors import PyMongoError

from auth.jwt_handler import create_access_token, verify_token
from auth.password_handler import hash_password, verify_password
from core.errors import AuthError, UpstreamError
from models.user import AdminResponse

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

SessionListener = Callable[[str, "AdminSession"], None]


class AdminSession(BaseModel):
    access_token: str
    token_type: str = "bearer"
    admin: AdminResponse
    expires_at: Optional[datetime] = None


class SessionManager:
    def __init__(self):
        # jti -> exp timestamp; held in this process only, so revocation is per worker.
        self._revoked: Dict[str, float] = {}
        self._listeners: List[SessionListener] = []

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener for sign-in/sign-out; returns the unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str, session: "AdminSession") -> None:
        for listener in list(self._listeners):
            listener(event, session)

    def prune_revoked(self, now: Optional[float] = None) -> int:
        """Forget revoked token ids whose tokens have expired anyway; returns how many remain."""
        now = time.time() if now is None else now
        for jti, expires in list(self._revoked.items()):
            if expires <= now:
                del self._revoked[jti]
        return len(self._revoked)

    async def sign_in(self, db, email: str, password: str) -> AdminSession:
        try:
            admin = await db["admins"].find_one({"email": email.lower()})
        except PyMongoError as exc:
            raise UpstreamError(str(exc))
        if not admin or not verify_password(password, admin.get("password", "")):
            raise AuthError("Invalid login credentials")

        token = create_access_token(data={"sub": str(admin["_id"])}, user_type="admin")
        session = self._build_session(token, admin, verify_token(token))
        self._notify(SIGNED_IN, session)
        return session

    async def get_current_session(self, db, token: Optional[str]) -> Optional[AdminSession]:
        if not token:
            return None
        payload = verify_token(token)
        if not payload or payload.get("user_type") != "admin" or payload.get("jti") in self._revoked:
            return None
        admin_id = payload.get("sub")
        if not admin_id or not ObjectId.is_valid(admin_id):
            return None
        try:
            admin = await db["admins"].find_one({"_id": ObjectId(admin_id)})
        except PyMongoError as exc:
            raise UpstreamError(str(exc))
        if not admin:
            return None
        return self._build_session(token, admin, payload)

    async def sign_out(self, db, token: Optional[str]) -> None:
        session = await self.get_current_session(db, token)
        payload = verify_token(token) if token else None
        self.prune_revoked()
        if payload and payload.get("jti"):
            self._revoked[payload["jti"]] = float(payload.get("exp") or 0)
        if session is not None:
            self._notify(SIGNED_OUT, session)

    @staticmethod
    def _build_session(token: str, admin: dict, payload: Optional[dict]) -> AdminSession:
        admin = dict(admin)
        admin["id"] = str(admin.pop("_id"))
        expires_at = datetime.utcfromtimestamp(payload["exp"]) if payload and payload.get("exp") else None
        return AdminSession(access_token=token, admin=AdminResponse(**admin), expires_at=expires_at)


async def ensure_admin_user(db, email: Optional[str], password: Optional[str]) -> None:
    """Seed the configured admin account when it does not exist yet."""
    if not email or not password:
        return
    email = email.lower()
    if await db["admins"].find_one({"email": email}):
        return
    await db["admins"].insert_one({
        "email": email,
        "password": hash_password(password),
        "full_name": "Administrator",
        "created_at": datetime.utcnow(),
    })
    logger.info("Seeded admin account %s", email)


session_manager = SessionManager()
