import os
from dotenv import load_dotenv
from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from backend.core import config


load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL")

engine = create_engine(DATABASE_URL, echo=config.SQL_ECHO)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_scheduling_schema_checked = False

SCHEDULING_INDEXES = [
    'CREATE INDEX IF NOT EXISTS idx_appointments_provider_range '
    'ON appointments(provider_id, start_time, end_time)',
    'CREATE INDEX IF NOT EXISTS idx_blocked_time_slots_provider_range '
    'ON blocked_time_slots(provider_id, start_time, end_time)',
]


def ensure_scheduling_schema() -> None:
    """Add columns older appointment tables lack and create range indexes.

    Runs once per process; later calls return immediately.
    """
    global _scheduling_schema_checked

    if _scheduling_schema_checked:
        return

    with _schema_lock:
        if _scheduling_schema_checked:
            return

        inspector = inspect(engine)
        table_names = set(inspector.get_table_names())

        if not {'appointments', 'blocked_time_slots'} <= table_names:
            _scheduling_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('appointments')}
        migration_steps = [
            ('provider_id', 'ALTER TABLE appointments ADD COLUMN provider_id VARCHAR'),
            ('status', 'ALTER TABLE appointments ADD COLUMN status VARCHAR'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            for statement in SCHEDULING_INDEXES:
                connection.execute(text(statement))

        _scheduling_schema_checked = True
