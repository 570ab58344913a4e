"""
Tests for forgot-password / reset-password
"""

from datetime import datetime, timedelta

from mongomock.collection import Collection
from pymongo.errors import PyMongoError

from auth import verify_password
from conftest import login, signup
from errors import MailError


def request_reset(client, email="a@x.com"):
    return client.post("/forgot-password", json={"email": email})


class TestForgotPassword:

    def test_sends_link_with_stored_token(self, client, mongo_db, mailer):
        signup(client)
        response = request_reset(client)
        assert response.status_code == 200
        assert response.json() == {"message": "Reset link sent"}

        assert len(mailer.sent) == 1
        mail = mailer.sent[0]
        assert mail["to"] == "a@x.com"
        assert mail["subject"] == "Password Reset Request"

        record = mongo_db.password_resets.find_one({"email": "a@x.com"})
        assert record["used"] is False
        assert f"https://pingme.test/reset-password?token={record['token']}" in mail["html"]

    def test_unknown_email_sends_nothing(self, client, mailer, mongo_db):
        response = request_reset(client, "ghost@x.com")
        assert response.status_code == 200
        assert mailer.sent == []
        assert mongo_db.password_resets.count_documents({}) == 0

    def test_mail_failure(self, client, mailer):
        signup(client)
        mailer.fail_with = MailError(detail="SMTP down")
        response = request_reset(client)
        assert response.status_code == 500
        assert response.json() == {"message": "Failed to send email", "error": "SMTP down"}

    def test_tokens_differ(self, client, mongo_db):
        signup(client)
        request_reset(client)
        request_reset(client)
        tokens = {r["token"] for r in mongo_db.password_resets.find()}
        assert len(tokens) == 2


class TestResetPassword:

    def _token(self, client, mongo_db):
        signup(client)
        request_reset(client)
        return mongo_db.password_resets.find_one()["token"]

    def test_reset_changes_password_once(self, client, mongo_db):
        token = self._token(client, mongo_db)
        response = client.post("/reset-password", json={"token": token, "newPassword": "new-pw"})
        assert response.status_code == 200
        assert response.json() == {"message": "Password updated"}

        user = mongo_db.users.find_one({"email": "a@x.com"})
        assert verify_password("new-pw", user["password"])
        assert login(client, password="pw").status_code == 400
        assert login(client, password="new-pw").status_code == 200

        reused = client.post("/reset-password", json={"token": token, "newPassword": "again"})
        assert reused.status_code == 400
        assert reused.json() == {"message": "Invalid or expired token"}

    def test_unknown_token(self, client):
        response = client.post("/reset-password", json={"token": "nope", "newPassword": "x"})
        assert response.status_code == 400

    def test_expired_token(self, client, mongo_db):
        token = self._token(client, mongo_db)
        mongo_db.password_resets.update_one(
            {"token": token}, {"$set": {"expires_at": datetime.utcnow() - timedelta(minutes=1)}}
        )
        response = client.post("/reset-password", json={"token": token, "newPassword": "x"})
        assert response.status_code == 400
        user = mongo_db.users.find_one({"email": "a@x.com"})
        assert verify_password("pw", user["password"])

    def test_blank_new_password(self, client, mongo_db):
        token = self._token(client, mongo_db)
        response = client.post("/reset-password", json={"token": token, "newPassword": " "})
        assert response.status_code == 400
        assert mongo_db.password_resets.find_one({"token": token})["used"] is False

    def test_failed_password_write_keeps_token_usable(self, client, mongo_db, monkeypatch):
        token = self._token(client, mongo_db)
        original_update = Collection.update_one

        def failing_update(self, filter, update, *args, **kwargs):
            if self.name == "users":
                raise PyMongoError("write failed")
            return original_update(self, filter, update, *args, **kwargs)

        monkeypatch.setattr(Collection, "update_one", failing_update)
        failed = client.post("/reset-password", json={"token": token, "newPassword": "new-pw"})
        assert failed.status_code == 500
        assert failed.json() == {"message": "Password reset failed", "error": "write failed"}
        assert mongo_db.password_resets.find_one({"token": token})["used"] is False

        monkeypatch.undo()
        retry = client.post("/reset-password", json={"token": token, "newPassword": "new-pw"})
        assert retry.status_code == 200
        assert login(client, password="new-pw").status_code == 200

    def test_missing_user_is_storage_error(self, client, mongo_db):
        token = self._token(client, mongo_db)
        mongo_db.users.delete_many({})
        response = client.post("/reset-password", json={"token": token, "newPassword": "new-pw"})
        assert response.status_code == 500
        assert response.json()["error"] == "user no longer exists"
        assert mongo_db.password_resets.find_one({"token": token})["used"] is False
