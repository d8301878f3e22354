"""JWT issue / verify utilities for account access tokens"""
from datetime import datetime, timedelta, timezone
from typing import Dict, Any
import jwt

from overseas_tracker.config.settings import SecuritySettings


def _build_payload(subject: str, expires_minutes: int, scopes: list[str] | None = None) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    return {
        "sub": subject,
        "scopes": scopes or [],
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }


def create_access_token(subject: str, security: SecuritySettings, scopes: list[str] | None = None) -> str:
    payload = _build_payload(subject, security.access_token_minutes, scopes)
    return jwt.encode(payload, security.jwt_secret, algorithm=security.jwt_algorithm)


def decode_token(token: str, security: SecuritySettings) -> Dict[str, Any] | None:
    try:
        return jwt.decode(token, security.jwt_secret, algorithms=[security.jwt_algorithm])
    except jwt.PyJWTError:
        return None
