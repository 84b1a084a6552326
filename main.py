import uvicorn

from core.config import load_settings
from core.db import make_engine, make_session_factory
from core.logger import get_logger
from init_db import init_db
from web.app import create_app

_logger = get_logger("main")


def main():
    settings = load_settings()
    # The process owns the connection pool and hands it to the app
    engine = make_engine(settings.database_url, settings.db_timeout)
    init_db(engine)

    app = create_app(make_session_factory(engine), settings)
    _logger.info(f"Storefront running on http://localhost:{settings.port} ({settings.app_env})")
    try:
        uvicorn.run(app, host="0.0.0.0", port=settings.port)
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
