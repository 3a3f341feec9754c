import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES, VERIFY_EMAIL_EXPIRE_MINUTES
from app.db import get_db
from app.models import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

VERIFY_EMAIL_SCOPE = "verify_email"


def verify_password(plain_password, password_hash):
    return pwd_context.verify(plain_password, password_hash)


def hash_password(password):
    if not isinstance(password, (str, bytes)):
        raise TypeError("Password must be a string or bytes.")
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_email_verification_token(user_id: int, email: str) -> str:
    """Short-lived token carried by the link in the verification email."""
    to_encode = {"sub": str(user_id), "email": email, "scope": VERIFY_EMAIL_SCOPE}
    expire = datetime.now(timezone.utc) + timedelta(minutes=VERIFY_EMAIL_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_email_verification_token(token: str) -> dict:
    """Decode a verification token and return {"user_id", "email"}."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Verification link is invalid or has expired.",
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise credentials_exception

    if payload.get("scope") != VERIFY_EMAIL_SCOPE:
        raise credentials_exception
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise credentials_exception
    return {"user_id": user_id, "email": payload.get("email")}


async def get_current_user(token: str = Depends(oauth2_scheme), db: AsyncSession = Depends(get_db)) -> User:
    """
    Resolve the bearer token to a users row.
    Every protected router depends on this; it replaces the session object
    the mobile auth context used to mirror.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        # verification tokens are not access tokens
        if payload.get("scope") is not None:
            raise credentials_exception
        user_id_str: str = payload.get("sub")
        if user_id_str is None:
            raise credentials_exception
        try:
            user_id = int(user_id_str)
        except ValueError:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    res = await db.execute(select(User).where(User.id == user_id))
    user = res.scalar_one_or_none()

    if user is None:
        logger.warning("Token for missing user id=%s", user_id)
        raise credentials_exception
    return user


def require_role(*roles: str):
    """Dependency factory: 403 unless the current user has one of `roles`."""

    async def _checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Only {' or '.join(roles)} accounts can do this.",
            )
        return current_user

    return _checker
