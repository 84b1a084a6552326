# web/app.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse

# Import all models FIRST to ensure SQLAlchemy relationships are registered
from models.user import User  # noqa: F401
from models.product import Product  # noqa: F401
from models.cart import Cart  # noqa: F401
from models.order import Order, OrderItem  # noqa: F401

from core.config import load_settings
from core.errors import (
    AuthError,
    CredentialError,
    EmptyCartError,
    HashingError,
    StoreError,
    StoreUnavailable,
    UserExists,
)
from core.logger import get_logger
from web import auth_views, shop_views

_logger = get_logger(__name__)


def _message(status_code: int, exc):
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


def register_error_handlers(app: FastAPI):
    @app.exception_handler(AuthError)
    async def redirect_to_login(request: Request, exc: AuthError):
        return RedirectResponse("/login", status_code=303)

    @app.exception_handler(CredentialError)
    async def invalid_credentials(request: Request, exc: CredentialError):
        return _message(401, exc)

    @app.exception_handler(UserExists)
    async def user_exists(request: Request, exc: UserExists):
        return _message(409, exc)

    @app.exception_handler(EmptyCartError)
    async def empty_cart(request: Request, exc: EmptyCartError):
        return _message(400, exc)

    @app.exception_handler(StoreUnavailable)
    async def store_unavailable(request: Request, exc: StoreUnavailable):
        return _message(503, exc)

    @app.exception_handler(StoreError)
    async def store_error(request: Request, exc: StoreError):
        _logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return _message(500, exc)

    @app.exception_handler(HashingError)
    async def hashing_error(request: Request, exc: HashingError):
        _logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return _message(500, exc)


def create_app(session_factory, settings=None) -> FastAPI:
    """Build the storefront app around an explicitly owned session factory."""
    app = FastAPI(title="Storefront")
    app.state.session_factory = session_factory
    app.state.settings = settings or load_settings()

    register_error_handlers(app)
    app.include_router(auth_views.router)
    app.include_router(shop_views.router)
    return app
