from datetime import datetime, timedelta
from typing import Any, Dict, Optional
import logging
import uuid
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from config import settings
from config.database import Database
from core.exceptions import AuthError, PermissionDeniedError
from schemas.user import Role, User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

ACCESS_PURPOSE = "access"
PASSWORD_RESET_PURPOSE = "password_reset"
ADMIN_ONLY_MESSAGE = "Doar administratorii au acces la această secțiune"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def create_access_token(user_id: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": user_id,
        "role": role,
        "jti": uuid.uuid4().hex,
        "purpose": ACCESS_PURPOSE,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_password_reset_token(user_id: str, nonce: str) -> str:
    expire = datetime.utcnow() + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES)
    to_encode = {
        "sub": user_id,
        "nonce": nonce,
        "purpose": PASSWORD_RESET_PURPOSE,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str, purpose: str = ACCESS_PURPOSE) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise AuthError("invalid-token")
    if payload.get("purpose") != purpose or not payload.get("sub"):
        raise AuthError("invalid-token")
    return payload


async def is_token_revoked(jti: Optional[str]) -> bool:
    if not jti:
        return True
    db = Database()
    return await db.revoked_tokens.find_one({"jti": jti}) is not None


async def revoke_token(payload: Dict[str, Any]) -> None:
    db = Database()
    await db.revoked_tokens.update_one(
        {"jti": payload["jti"]},
        {"$setOnInsert": {
            "user_id": payload["sub"],
            "revoked_at": datetime.utcnow(),
        }},
        upsert=True
    )
    logger.info(f"Token revoked for {payload['sub']}")


async def authenticate_token(token: Optional[str]) -> User:
    """Resolve a bearer token to its user, refusing revoked tokens and disabled accounts."""
    if not token:
        raise AuthError("invalid-token")
    payload = decode_token(token)
    if await is_token_revoked(payload.get("jti")):
        raise AuthError("invalid-token")

    db = Database()
    user = await db.users.find_one({"user_id": payload["sub"]}, {"password": 0})
    if not user:
        raise AuthError("invalid-token")
    if user.get("disabled"):
        raise AuthError("user-disabled", status_code=403)
    return User(**user)


async def get_token_claims(token: Optional[str] = Depends(oauth2_scheme)) -> Dict[str, Any]:
    if not token:
        raise AuthError("invalid-token")
    payload = decode_token(token)
    if await is_token_revoked(payload.get("jti")):
        raise AuthError("invalid-token")
    return payload


async def get_current_user(token: Optional[str] = Depends(oauth2_scheme)) -> User:
    return await authenticate_token(token)


def require_role(*roles: Role, detail: str = ADMIN_ONLY_MESSAGE):
    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise PermissionDeniedError(detail)
        return current_user
    return checker
