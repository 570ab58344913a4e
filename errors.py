from typing import Optional


class PingMeError(Exception):
    """Base error for everything the services raise towards the HTTP layer.

    ``message`` is shown to the client, ``detail`` is the underlying cause and is
    only attached to server-side failures.
    """

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        if message is not None:
            self.message = message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(PingMeError):
    status_code = 400
    message = "Invalid request"


class Conflict(PingMeError):
    status_code = 400
    message = "User already exists"


class NotFound(PingMeError):
    status_code = 400
    message = "User not found"


class InvalidCredentials(PingMeError):
    status_code = 400
    message = "Invalid password"


class PaymentFailed(PingMeError):
    status_code = 400
    message = "Payment failed"


class Unauthorized(PingMeError):
    status_code = 401
    message = "Unauthorized"


class StorageError(PingMeError):
    status_code = 500
    message = "Storage failure"


class MailError(PingMeError):
    status_code = 500
    message = "Failed to send email"
