from typing import Optional

from fastapi import APIRouter, Depends
from pymongo.database import Database

from auth import clear_session_cookie, get_session, set_session_cookie
from config import Settings, get_settings
from database import get_db
from mailer import Mailer, get_mailer
from models import (ForgotPasswordRequest, ResetPasswordRequest, UserCreate,
                    UserLogin, parse, request_payload)
from responses import Responder, get_responder
from services import accounts, notifications
from sessions import Session, SessionStore, get_session_store

router = APIRouter(tags=["Auth"])


@router.post("/signup")
def signup(data: dict = Depends(request_payload),
           db: Database = Depends(get_db),
           respond: Responder = Depends(get_responder)):
    user = parse(UserCreate, data)
    accounts.signup(db, user)
    return respond.success("Signup successful", status_code=201, redirect_to=respond.login_path)


@router.post("/login")
def login(data: dict = Depends(request_payload),
          current: Optional[Session] = Depends(get_session),
          db: Database = Depends(get_db),
          store: SessionStore = Depends(get_session_store),
          settings: Settings = Depends(get_settings),
          respond: Responder = Depends(get_responder)):
    credentials = parse(UserLogin, data)
    session = accounts.login(db, store, credentials)
    if current is not None:
        # never keep a pre-login session id around
        accounts.logout(store, current.session_id)
    response = respond.success("Login successful", redirect_to=settings.HOME_PATH, user=session.user)
    set_session_cookie(response, session, settings)
    return response


@router.get("/logout")
def logout(current: Optional[Session] = Depends(get_session),
           store: SessionStore = Depends(get_session_store),
           settings: Settings = Depends(get_settings),
           respond: Responder = Depends(get_responder)):
    if current is not None:
        accounts.logout(store, current.session_id)
    response = respond.success("Logged out successfully", redirect_to=respond.login_path)
    clear_session_cookie(response, settings)
    return response


@router.post("/forgot-password")
def forgot_password(data: dict = Depends(request_payload),
                    db: Database = Depends(get_db),
                    mailer: Mailer = Depends(get_mailer),
                    settings: Settings = Depends(get_settings),
                    respond: Responder = Depends(get_responder)):
    request = parse(ForgotPasswordRequest, data)
    notifications.request_password_reset(
        db, mailer, request.email,
        settings.RESET_URL_BASE, settings.RESET_TOKEN_TTL_MINUTES,
    )
    return respond.success("Reset link sent")


@router.post("/reset-password")
def reset_password(data: dict = Depends(request_payload),
                   db: Database = Depends(get_db),
                   respond: Responder = Depends(get_responder)):
    request = parse(ResetPasswordRequest, data)
    notifications.reset_password(db, request.token, request.new_password)
    return respond.success("Password updated", redirect_to=respond.login_path)
