# web/deps.py
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from core.auth_service import get_user_by_id
from core.db import get_db
from core.errors import AuthError
from core.session_manager import extract_token, verify_token


def get_settings(request: Request):
    return request.app.state.settings


def get_session(request: Request):
    yield from get_db(request.app.state.session_factory)


def optional_claims(request: Request, settings=Depends(get_settings)):
    """Claims of a valid session token, or None."""
    token = extract_token(request.cookies, request.headers)
    return verify_token(token, settings.jwt_secret)


def current_claims(claims=Depends(optional_claims)):
    # Expired, malformed and missing tokens all end up at the login page
    if claims is None:
        raise AuthError()
    return claims


def current_user(claims=Depends(current_claims), db: Session = Depends(get_session)):
    user = get_user_by_id(db, claims["id"])
    if user is None:
        raise HTTPException(status_code=404, detail="no user found")
    return user
