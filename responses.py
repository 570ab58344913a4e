"""Response policy shared by every route.

The same handlers serve both the JSON API and the page-rendering frontend; only
the way a result is turned into an HTTP response differs.
"""

from typing import Optional

from fastapi import Depends
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse

from config import Settings, get_settings
from errors import PingMeError, Unauthorized


class Responder:
    def __init__(self, mode: str = "api", login_path: str = "/login"):
        self.mode = mode
        self.login_path = login_path

    @property
    def is_page(self) -> bool:
        return self.mode == "page"

    def success(self, message: str, status_code: int = 200,
                redirect_to: Optional[str] = None, **extra):
        if self.is_page:
            if redirect_to:
                return RedirectResponse(redirect_to, status_code=303)
            return PlainTextResponse(message, status_code=status_code)
        body = {"message": message}
        body.update(extra)
        return JSONResponse(body, status_code=status_code)

    def failure(self, exc: PingMeError):
        if self.is_page:
            if isinstance(exc, Unauthorized):
                return RedirectResponse(self.login_path, status_code=303)
            return PlainTextResponse(exc.message, status_code=exc.status_code)
        body = {"message": exc.message}
        if exc.detail:
            body["error"] = exc.detail
        return JSONResponse(body, status_code=exc.status_code)


def get_responder(settings: Settings = Depends(get_settings)) -> Responder:
    return Responder(settings.RESPONSE_MODE, settings.LOGIN_PATH)
