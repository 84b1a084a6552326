# core/db.py
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import OperationalError, SQLAlchemyError, TimeoutError as PoolTimeout
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from core.errors import StoreError, StoreUnavailable
from core.logger import get_logger

_logger = get_logger(__name__)

Base = declarative_base()


def make_engine(database_url: str, timeout: int = 5):
    """Create an engine whose store round-trips are bounded by `timeout` seconds."""
    if database_url.startswith("sqlite"):
        # Busy timeout for sqlite; it has no pool timeout to set
        engine = create_engine(
            database_url,
            future=True,
            connect_args={"check_same_thread": False, "timeout": timeout},
        )

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys = ON;")
            cur.close()

        return engine

    return create_engine(
        database_url,
        future=True,
        pool_pre_ping=True,
        pool_timeout=timeout,
        connect_args={"connect_timeout": timeout},
    )


def make_session_factory(engine):
    # expire_on_commit=False keeps loaded rows usable after commit
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)


def get_db(session_factory):
    """Yield a session from `session_factory` and always close it."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def store_errors(db: Session, action: str):
    """Roll back `db` on any failure and translate SQLAlchemy errors.

    Connection loss and timeouts become StoreUnavailable, every other
    SQLAlchemy error becomes StoreError. Other exceptions pass through
    unchanged after the rollback.
    """
    try:
        yield
    except (OperationalError, PoolTimeout) as e:
        db.rollback()
        _logger.error(f"Store unavailable while trying to {action}: {e}")
        raise StoreUnavailable() from e
    except SQLAlchemyError as e:
        db.rollback()
        _logger.exception(f"Store error while trying to {action}")
        raise StoreError() from e
    except Exception:
        db.rollback()
        raise


def insert_on_conflict(db: Session, model, values: dict, conflict_columns, increment=()):
    """Insert one row in a single statement, resolving unique conflicts.

    On a conflict over `conflict_columns` the columns named in `increment`
    are added to the stored row; with no `increment` the insert is skipped.
    """
    table = model.__table__
    dialect = db.get_bind().dialect.name

    if dialect in ("mysql", "mariadb"):
        stmt = mysql.insert(table).values(**values)
        if increment:
            stmt = stmt.on_duplicate_key_update(
                {col: table.c[col] + stmt.inserted[col] for col in increment}
            )
        else:
            stmt = stmt.prefix_with("IGNORE")
        return db.execute(stmt)

    insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
    stmt = insert(table).values(**values)
    if increment:
        stmt = stmt.on_conflict_do_update(
            index_elements=list(conflict_columns),
            set_={col: table.c[col] + stmt.excluded[col] for col in increment},
        )
    else:
        stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_columns))
    return db.execute(stmt)
