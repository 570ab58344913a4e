import logging
import secrets
from typing import Optional

from fastapi import Depends, Request
from jose import JWTError, jwt
from passlib.context import CryptContext

from config import Settings, get_settings
from errors import Unauthorized
from sessions import Session, SessionStore, get_session_store

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)

_fallback_secret: Optional[str] = None


def hash_password(password):
    return pwd_context.hash(password)


def verify_password(plain, hashed):
    return pwd_context.verify(plain, hashed)


def session_secret(settings: Settings) -> str:
    global _fallback_secret
    if settings.SESSION_SECRET:
        return settings.SESSION_SECRET
    if _fallback_secret is None:
        logger.warning("SESSION_SECRET is not set, sessions will not survive a restart")
        _fallback_secret = secrets.token_urlsafe(32)
    return _fallback_secret


def sign_session_id(session_id: str, secret: str) -> str:
    return jwt.encode({"sid": session_id}, secret, algorithm=ALGORITHM)


def read_session_id(token: str, secret: str) -> Optional[str]:
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected session cookie: {e}")
        return None
    return payload.get("sid")


def set_session_cookie(response, session: Session, settings: Settings):
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=sign_session_id(session.session_id, session_secret(settings)),
        httponly=True,
        samesite="lax",
        max_age=settings.SESSION_TTL_SECONDS,
    )


def clear_session_cookie(response, settings: Settings):
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, httponly=True, samesite="lax")


def get_session(request: Request,
                settings: Settings = Depends(get_settings),
                store: SessionStore = Depends(get_session_store)) -> Optional[Session]:
    """Session attached to the request's cookie, or None."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None
    session_id = read_session_id(token, session_secret(settings))
    if session_id is None:
        return None
    return store.get(session_id)


def require_login(session: Optional[Session] = Depends(get_session)) -> Session:
    # trusts the user snapshot taken at login, no lookup against the users collection
    if session is None or not session.is_logged_in:
        raise Unauthorized()
    return session
