from typing import Optional

from fastapi import APIRouter, Depends

from auth import get_session
from sessions import Session

router = APIRouter(tags=["Session"])


@router.get("/check-session")
def check_session(session: Optional[Session] = Depends(get_session)):
    if session is not None and session.is_logged_in:
        return {"loggedIn": True, "user": session.user}
    return {"loggedIn": False}
