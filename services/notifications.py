"""Password reset: token issue by email and single-use redemption."""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from pymongo.database import Database
from pymongo.errors import PyMongoError

from auth import hash_password
from errors import StorageError, ValidationError
from mailer import Mailer

logger = logging.getLogger(__name__)

RESET_SUBJECT = "Password Reset Request"


def generate_reset_token() -> str:
    return secrets.token_urlsafe(32)


def reset_email_html(link: str) -> str:
    return (
        "<h1>Password Reset</h1>"
        "<p>Click the link below to reset your password:</p>"
        f'<a href="{link}">Reset Password</a>'
    )


def request_password_reset(db: Database, mailer: Mailer, email: str,
                           reset_url_base: str, ttl_minutes: int) -> Optional[str]:
    """Issue a reset token for ``email`` and mail the link.

    Returns the token, or None when no account uses that email (nothing is sent,
    the caller answers the same way so accounts can't be probed).
    """
    try:
        user = db.users.find_one({"email": email})
        if not user:
            logger.info("Password reset requested for unknown email")
            return None
        token = generate_reset_token()
        db.password_resets.insert_one({
            "token": token,
            "user_id": user["_id"],
            "email": email,
            "expires_at": datetime.utcnow() + timedelta(minutes=ttl_minutes),
            "used": False,
        })
    except PyMongoError as e:
        logger.error(f"Reset token error: {e}")
        raise StorageError("Failed to send email", str(e))

    link = f"{reset_url_base}?token={token}"
    mailer.send(email, RESET_SUBJECT, reset_email_html(link))
    return token


def reset_password(db: Database, token: str, new_password: str) -> None:
    if not new_password or not new_password.strip():
        raise ValidationError("newPassword: must not be empty")
    hashed = hash_password(new_password)
    now = datetime.utcnow()
    try:
        # claiming the token and checking it is one atomic step, so it can only be used once
        record = db.password_resets.find_one_and_update(
            {"token": token, "used": False, "expires_at": {"$gt": now}},
            {"$set": {"used": True, "used_at": now}},
        )
    except PyMongoError as e:
        logger.error(f"Password reset error: {e}")
        raise StorageError("Password reset failed", str(e))
    if record is None:
        raise ValidationError("Invalid or expired token")

    try:
        result = db.users.update_one({"_id": record["user_id"]}, {"$set": {"password": hashed}})
    except PyMongoError as e:
        logger.error(f"Password reset error: {e}")
        _release_token(db, token)
        raise StorageError("Password reset failed", str(e))
    if result.matched_count == 0:
        logger.error("Password reset for missing user %s", record["user_id"])
        _release_token(db, token)
        raise StorageError("Password reset failed", "user no longer exists")
    logger.info("Password reset for user %s", record["user_id"])


def _release_token(db: Database, token: str) -> None:
    # the password was not written, so the token stays redeemable
    try:
        db.password_resets.update_one(
            {"token": token, "used": True},
            {"$set": {"used": False}, "$unset": {"used_at": ""}},
        )
    except PyMongoError as e:
        logger.error(f"Could not release reset token: {e}")
