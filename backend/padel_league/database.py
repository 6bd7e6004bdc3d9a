from pathlib import Path
from typing import Generator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from padel_league.config import Settings, get_settings


def build_engine(settings: Settings) -> Engine:
    connect_args = {"check_same_thread": False} if settings.is_sqlite else {}

    if settings.is_sqlite and ":memory:" not in settings.database_url:
        db_path = settings.database_url.replace("sqlite:///", "", 1)
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(
        settings.database_url,
        echo=settings.sql_echo,
        connect_args=connect_args,
    )
    if settings.is_sqlite:
        enable_sqlite_savepoints(engine)
    return engine


def enable_sqlite_savepoints(engine: Engine) -> None:
    """
    Let SQLAlchemy own transaction boundaries on pysqlite.

    The driver only emits BEGIN before DML, so a SAVEPOINT opened first becomes
    the outer transaction and its RELEASE commits. Emitting BEGIN ourselves
    keeps savepoints nested inside one real transaction.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


engine: Engine = build_engine(get_settings())


def get_session() -> Generator[Session, None, None]:
    """Get database session"""
    with Session(engine) as session:
        yield session


def init_db(bind: Engine = engine) -> None:
    """Initialize database - create all tables"""
    # Import all models to ensure they're registered with SQLModel metadata
    from padel_league.models.category import LeagueCategory  # noqa: F401
    from padel_league.models.court import SeasonCourt  # noqa: F401
    from padel_league.models.day_group import DayGroup  # noqa: F401
    from padel_league.models.match_day import MatchDay  # noqa: F401
    from padel_league.models.matchday_override import MatchdayScheduleOverride  # noqa: F401
    from padel_league.models.player import LeaguePlayer  # noqa: F401
    from padel_league.models.player_availability import (  # noqa: F401
        PlayerAvailability,
        PlayerAvailabilityOverride,
    )
    from padel_league.models.rotation import DoublesMatch, Rotation  # noqa: F401
    from padel_league.models.season import Season  # noqa: F401

    SQLModel.metadata.create_all(bind)
