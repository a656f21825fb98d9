from datetime import datetime, timezone
from typing import Optional

from peewee import Database, DatabaseProxy, Model
from playhouse.db_url import connect

from core.settings import settings

# Bound to a concrete database by init_db(); tests bind an in-memory SQLite.
db = DatabaseProxy()


class BaseModel(Model):
    class Meta:
        database = db


def get_all_models() -> list:
    """All tables the platform writes to or reads from, dependency order."""
    from .models.pipeline_run import PipelineRun
    from .models.league import Season, Week, Team, Player, Matchup
    from .models.stats import (
        PlayerDayStatLine,
        TeamDayStatLine,
        PlayerWeekStatLine,
        PlayerSplitStatLine,
        PlayerTotalStatLine,
        TeamWeekStatLine,
        TeamSeasonStatLine,
    )

    return [
        PipelineRun,
        # League dimension tables
        Season, Week, Team, Player, Matchup,
        # Derived stat lines
        PlayerDayStatLine, TeamDayStatLine,
        PlayerWeekStatLine, TeamWeekStatLine,
        PlayerSplitStatLine, PlayerTotalStatLine,
        TeamSeasonStatLine,
    ]


def init_db(database: Optional[Database] = None, create_tables: bool = True) -> Database:
    """
    Bind the proxy to a database and create tables if they don't exist.

    Args:
        database: Explicit database to bind. Defaults to DATABASE_URL.
        create_tables: Create missing tables (safe=True is idempotent)
    """
    if database is None:
        database = connect(settings.database_url)
    db.initialize(database)

    if create_tables:
        db.connect(reuse_if_open=True)
        db.create_tables(get_all_models(), safe=True)

    return database


def close_db() -> None:
    """Close database connection."""
    if db.obj is not None and not db.is_closed():
        db.close()


def utcnow() -> datetime:
    """Naive UTC timestamp for created_at/updated_at columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
