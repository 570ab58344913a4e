"""Server-side session storage.

A session is keyed by an opaque id and holds the login flag plus a copy of the
user taken at login time. Stores only know how to get, set and destroy sessions;
cookie handling lives in ``auth``.
"""

import logging
import secrets
from datetime import datetime, timedelta
from threading import Lock
from typing import Dict, Optional

from fastapi import Depends
from pydantic import BaseModel
from pymongo.database import Database
from pymongo.errors import PyMongoError

from config import Settings, get_settings
from database import get_db
from errors import StorageError

logger = logging.getLogger(__name__)


class Session(BaseModel):
    session_id: str
    is_logged_in: bool = False
    user: Optional[dict] = None
    expires_at: datetime

    def expired(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.utcnow()) >= self.expires_at


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


class SessionStore:
    """Interface every session backend implements."""

    def __init__(self, ttl_seconds: int):
        self.ttl = timedelta(seconds=ttl_seconds)

    def create(self, user: dict) -> Session:
        session = Session(
            session_id=new_session_id(),
            is_logged_in=True,
            user=dict(user),
            expires_at=datetime.utcnow() + self.ttl,
        )
        self.set(session)
        return session

    def get(self, session_id: str) -> Optional[Session]:
        raise NotImplementedError

    def set(self, session: Session) -> None:
        raise NotImplementedError

    def destroy(self, session_id: str) -> None:
        raise NotImplementedError


class InMemorySessionStore(SessionStore):
    def __init__(self, ttl_seconds: int):
        super().__init__(ttl_seconds)
        self._sessions: Dict[str, Session] = {}
        self._lock = Lock()

    def get(self, session_id):
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None and session.expired():
                del self._sessions[session_id]
                return None
            return session

    def set(self, session):
        with self._lock:
            self._purge_expired()
            self._sessions[session.session_id] = session.model_copy(deep=True)

    def _purge_expired(self):
        now = datetime.utcnow()
        for session_id in [k for k, s in self._sessions.items() if s.expired(now)]:
            del self._sessions[session_id]

    def destroy(self, session_id):
        with self._lock:
            self._sessions.pop(session_id, None)

    def __len__(self):
        return len(self._sessions)


class MongoSessionStore(SessionStore):
    """Sessions kept in the ``sessions`` collection; a TTL index on
    ``expires_at`` (see ``database.init_db``) removes stale ones."""

    def __init__(self, db: Database, ttl_seconds: int):
        super().__init__(ttl_seconds)
        self.collection = db.sessions

    def get(self, session_id):
        try:
            doc = self.collection.find_one({"_id": session_id})
        except PyMongoError as e:
            logger.error(f"Session lookup failed: {e}")
            raise StorageError("Session lookup failed", str(e))
        if not doc:
            return None
        session = Session(
            session_id=doc["_id"],
            is_logged_in=doc.get("is_logged_in", False),
            user=doc.get("user"),
            expires_at=doc["expires_at"],
        )
        # the TTL monitor only runs once a minute
        if session.expired():
            return None
        return session

    def set(self, session):
        try:
            self.collection.replace_one(
                {"_id": session.session_id},
                {
                    "is_logged_in": session.is_logged_in,
                    "user": session.user,
                    "expires_at": session.expires_at,
                },
                upsert=True,
            )
        except PyMongoError as e:
            logger.error(f"Session save failed: {e}")
            raise StorageError("Session save failed", str(e))

    def destroy(self, session_id):
        try:
            self.collection.delete_one({"_id": session_id})
        except PyMongoError as e:
            logger.error(f"Session destroy failed: {e}")
            raise StorageError("Logout failed", str(e))


_memory_store: Optional[InMemorySessionStore] = None


def get_session_store(settings: Settings = Depends(get_settings),
                      db: Database = Depends(get_db)) -> SessionStore:
    global _memory_store
    if settings.SESSION_BACKEND == "memory":
        if _memory_store is None:
            _memory_store = InMemorySessionStore(settings.SESSION_TTL_SECONDS)
        return _memory_store
    return MongoSessionStore(db, settings.SESSION_TTL_SECONDS)
