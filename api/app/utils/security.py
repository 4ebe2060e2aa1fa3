"""
Password hashing
"""
import bcrypt

from app.config import settings


def hash_password(password: str, rounds: int = None) -> str:
    """Hash a plaintext password with bcrypt"""
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash"""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def hash_password_fields(data: dict) -> dict:
    """Return a copy of `data` with a plaintext `password` replaced by its hash"""
    if data.get("password"):
        data = {**data, "password": hash_password(data["password"])}
    return data
