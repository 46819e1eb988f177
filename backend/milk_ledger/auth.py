import warnings
# suppress the passlib crypt deprecation warning
warnings.filterwarnings(
    "ignore",
    category=DeprecationWarning,
    module="passlib.utils"
)
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from milk_ledger.config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    BCRYPT_ROUNDS,
    JWT_ALGORITHM,
    JWT_SECRET,
)
from milk_ledger.database import get_db
from milk_ledger.models import Account, RevokedToken
from milk_ledger.schemas import CurrentUser

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS
)
# auto_error is off so a missing header answers with our own 401 message
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login", auto_error=False)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"iat": now, "exp": expire})
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)


def issue_token(account: Account) -> str:
    return create_access_token(
        data={"id": account.id, "username": account.username, "role": account.role}
    )


def decode_access_token(token: str) -> CurrentUser:
    """Verify signature and expiry, returning the embedded identity.

    Raises ``JWTError`` for a bad signature, an expired or malformed token,
    and ``ValidationError`` when the claims do not describe an account.
    """
    payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    return CurrentUser.model_validate(payload)


async def authenticate_user(username: str, password: str, db: AsyncSession):
    result = await db.execute(select(Account).where(Account.username == username))
    account = result.scalars().first()
    if not account or not verify_password(password, account.password):
        return None
    return account


async def is_token_revoked(db: AsyncSession, token: str) -> bool:
    result = await db.execute(select(RevokedToken.id).where(RevokedToken.token == token))
    return result.first() is not None


async def get_token(token: Optional[str] = Depends(oauth2_scheme)) -> str:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access denied. No token provided.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


async def get_current_user(
    token: str = Depends(get_token),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    # the blacklist wins over an otherwise valid signature
    if await is_token_revoked(db, token):
        raise HTTPException(status_code=403, detail="Token is blacklisted.")
    try:
        return decode_access_token(token)
    except (JWTError, ValidationError):
        raise HTTPException(status_code=403, detail="Invalid token.")


async def require_buyer(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if current_user.role != "buyer":
        raise HTTPException(status_code=403, detail="Access denied. Buyer role required.")
    return current_user


async def require_seller(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if current_user.role != "seller":
        raise HTTPException(status_code=403, detail="Access denied. Seller role required.")
    return current_user


def ensure_owner(supplied_id: Optional[int], current_user: CurrentUser, detail: str) -> None:
    """Reject the request unless the caller-supplied id is the caller's own."""
    if supplied_id != current_user.id:
        raise HTTPException(status_code=403, detail=detail)
