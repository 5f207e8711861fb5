from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings

oauth2_scheme = HTTPBearer()


def create_jwt_token(data: Dict[str, Any], expires_minutes: Optional[int] = None) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_jwt_token(token: str) -> Optional[Dict[str, Any]]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError:
        return None


def get_current_claims(credentials: HTTPAuthorizationCredentials = Depends(oauth2_scheme)) -> Dict[str, Any]:
    payload = decode_jwt_token(credentials.credentials)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    if not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token: missing user ID")
    return payload


def get_current_user(claims: Dict[str, Any] = Depends(get_current_claims)) -> str:
    """Resolve the acting user id from the bearer token."""
    return str(claims["sub"])


def require_job_runner(claims: Dict[str, Any] = Depends(get_current_claims)) -> str:
    """Only tokens carrying one of JOB_ROLES may trigger background sweeps."""
    if claims.get("role") not in settings.job_roles_list:
        raise HTTPException(status_code=403, detail="Not allowed to run background jobs")
    return str(claims["sub"])
