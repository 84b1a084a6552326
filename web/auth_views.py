from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from core.auth_service import authenticate_user, create_user, resolve_federated_user
from core.errors import StoreError
from core.google_auth import authorization_url, fetch_google_user_info
from core.logger import get_logger
from core.session_manager import COOKIE_NAME, issue_token
from web.deps import get_session, get_settings
from web.schemas import FormPage

_logger = get_logger(__name__)

router = APIRouter()

STATE_COOKIE = "oauth_state"


def login_redirect(user, settings):
    """Redirect to the dashboard carrying a fresh session cookie."""
    response = RedirectResponse("/dashboard", status_code=303)
    token = issue_token(user.claims(), settings.jwt_secret)
    # No sameSite policy is set on the session cookie
    response.set_cookie(COOKIE_NAME, token, httponly=True, secure=settings.is_production,
                        samesite=None)
    return response


@router.get("/login", response_model=FormPage)
def login_page():
    return FormPage(page="login", action="/login", fields=["email", "password"],
                    google_login="/auth/google")


@router.get("/signup", response_model=FormPage)
def signup_page():
    return FormPage(page="signup", action="/signup",
                    fields=["first_name", "last_name", "email", "password"],
                    google_login="/auth/google")


@router.get("/forgot-password", response_model=FormPage)
def forgot_password_page():
    return FormPage(page="forgot-password", action="/forgot-password", fields=["email"])


@router.post("/signup")
def signup(
    first_name: str = Form(...),
    last_name: str = Form(""),
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_session),
):
    create_user(db, first_name, last_name, email, password)
    return RedirectResponse("/login", status_code=303)


@router.post("/login")
def login(
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_session),
    settings=Depends(get_settings),
):
    user = authenticate_user(db, email, password)
    return login_redirect(user, settings)


@router.get("/logout")
def logout():
    response = RedirectResponse("/login", status_code=303)
    response.delete_cookie(COOKIE_NAME)
    return response


@router.get("/auth/google")
def google_login(settings=Depends(get_settings)):
    url, state = authorization_url(settings)
    response = RedirectResponse(url, status_code=303)
    response.set_cookie(STATE_COOKIE, state, max_age=600, httponly=True,
                        secure=settings.is_production)
    return response


@router.get("/auth/google/callback")
def google_callback(
    request: Request,
    code: str = None,
    state: str = None,
    db: Session = Depends(get_session),
    settings=Depends(get_settings),
):
    failed = RedirectResponse("/login", status_code=303)
    failed.delete_cookie(STATE_COOKIE)

    if not code or not state or state != request.cookies.get(STATE_COOKIE):
        _logger.warning("Google callback rejected: missing code or state mismatch")
        return failed

    try:
        info = fetch_google_user_info(settings, code, state)
        user = resolve_federated_user(db, info.get("email"), info.get("name"))
    except StoreError as e:
        _logger.error(f"Google login failed, database error: {e.message}")
        return failed
    except Exception as e:
        _logger.warning(f"Google login failed: {e}")
        return failed

    response = login_redirect(user, settings)
    response.delete_cookie(STATE_COOKIE)
    return response
