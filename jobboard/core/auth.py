"""
Authentication Utility - Password and signed token handling.

Provides:
- Password hashing with bcrypt (also used for one-time codes)
- Signed JWT tokens for organization email verification
"""

from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext

from jobboard.core.config import get_settings

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_verification_token(email: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed email-verification token for an organization account."""
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.verification_expire_minutes))
    to_encode = {"email": email, "exp": expire}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token. Returns None when invalid or expired."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
