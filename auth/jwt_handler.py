from jose import jwt, JWTError
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
import uuid

from core.config import SECRET_KEY, ACCESS_TOKEN_EXPIRE_MINUTES

ALGORITHM = "HS256"


def create_access_token(
    data: Dict[str, Any],
    user_type: str = "admin",
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT access token with a unique id so it can be revoked on sign-out.
    """
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({
        "exp": expire,
        "user_type": user_type,
        "iat": datetime.utcnow(),
        "jti": uuid.uuid4().hex,
    })
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify a JWT token and return the payload if valid, else None.
    """
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
