import logging

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from auth import hash_password, verify_password
from errors import Conflict, InvalidCredentials, NotFound, StorageError
from models import UserCreate, UserLogin, public_user
from sessions import Session, SessionStore

logger = logging.getLogger(__name__)


def signup(db: Database, user: UserCreate) -> dict:
    try:
        if db.users.find_one({"email": user.email}):
            raise Conflict()
        user_data = {
            "username": user.username,
            "email": user.email,
            "password": hash_password(user.password),
        }
        user_data["_id"] = db.users.insert_one(user_data).inserted_id
    except DuplicateKeyError:
        # lost the race against a concurrent signup with the same email
        raise Conflict()
    except PyMongoError as e:
        logger.error(f"Signup error: {e}")
        raise StorageError("Signup failed", str(e))
    logger.info("Created user %s", user_data["_id"])
    return public_user(user_data)


def login(db: Database, store: SessionStore, credentials: UserLogin) -> Session:
    try:
        found = db.users.find_one({"email": credentials.email})
    except PyMongoError as e:
        logger.error(f"Login error: {e}")
        raise StorageError("Login failed", str(e))
    if not found:
        raise NotFound()
    if not verify_password(credentials.password, found["password"]):
        raise InvalidCredentials()
    session = store.create(public_user(found))
    logger.info("User %s logged in", found["_id"])
    return session


def logout(store: SessionStore, session_id: str) -> None:
    store.destroy(session_id)
