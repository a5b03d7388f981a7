from sqlalchemy import create_engine, event
from sqlalchemy.orm import (
    sessionmaker,
    DeclarativeBase,
    scoped_session,
    Session as SqlalchemySession,
)


from settings import (
    DATABASE_URL,
    DB_ECHO,
    DB_POOL_SIZE,
    DB_POOL_TIMEOUT,
    POSTGRES_DATABASE,
    POSTGRES_HOST,
    POSTGRES_PASSWORD,
    POSTGRES_PORT,
    POSTGRES_USER,
)


def get_database_url() -> str:
    if DATABASE_URL:
        return DATABASE_URL
    return f"postgresql+psycopg://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DATABASE}"


database_url = get_database_url()

if database_url.startswith("sqlite"):
    engine = create_engine(
        database_url,
        echo=DB_ECHO,
        pool_size=DB_POOL_SIZE,
        max_overflow=0,
        pool_timeout=DB_POOL_TIMEOUT,
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(engine, "connect")
    def _sqlite_on_connect(dbapi_connection, connection_record):
        # let sqlalchemy emit BEGIN itself, pysqlite's implicit one breaks savepoints
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _sqlite_on_begin(conn):
        # writers serialize on the database lock, same role as row locks on postgres
        conn.exec_driver_sql("BEGIN IMMEDIATE")

else:
    engine = create_engine(
        database_url,
        echo=DB_ECHO,
        pool_size=DB_POOL_SIZE,
        max_overflow=0,
        pool_timeout=DB_POOL_TIMEOUT,
    )

db = sessionmaker(engine, future=True, expire_on_commit=False)
factory_session = scoped_session(db)


def get_db_sync():
    SessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_db_sync_for_test(db: SqlalchemySession):
    def inner():
        yield db

    return inner


class Base(DeclarativeBase):
    pass


# define all model for alembic migration
from models.User import User  # NOQA
from models.Token import Token  # NOQA
from models.Category import Category  # NOQA
from models.Event import Event  # NOQA
from models.TicketType import TicketType  # NOQA
from models.PromoCode import PromoCode  # NOQA
from models.Ticket import Ticket  # NOQA
from models.Registration import Registration  # NOQA
