"""JWT helpers and the bearer-token dependencies.

Tokens are issued by the identity service; this process only verifies them
with the shared secret and reads the broker id and role out of the claims.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from credit_auction.core.config import get_settings
from credit_auction.schemas import TokenData

ADMIN_ROLES = {"admin", "super_admin"}

security = HTTPBearer()


def create_access_token(broker_id: str, role: str = "broker", expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    expire_delta = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": broker_id,
        "role": role,
        "exp": datetime.now(timezone.utc) + expire_delta,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> TokenData:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials") from exc

    broker_id = payload.get("sub")
    role = payload.get("role") or "broker"
    if not broker_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials")
    return TokenData(broker_id=broker_id, role=role)


async def get_current_broker(credentials: HTTPAuthorizationCredentials = Depends(security)) -> TokenData:
    return decode_access_token(credentials.credentials)


async def get_current_admin(principal: TokenData = Depends(get_current_broker)) -> TokenData:
    if principal.role not in ADMIN_ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return principal
