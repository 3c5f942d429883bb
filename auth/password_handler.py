import bcrypt


def hash_password(password: str | bytes) -> str:
    """
    Hash an admin password with bcrypt, accepting str or bytes.
    """
    password_bytes = password if isinstance(password, bytes) else password.encode('utf-8')
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a password against a stored bcrypt hash; a malformed hash never matches.
    """
    try:
        return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))
    except ValueError:
        return False
