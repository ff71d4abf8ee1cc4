# gimnasio/database.py

import logging
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from gimnasio.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def crear_engine(database_url: str):
    """
    Crea el engine para la URL dada.

    En SQLite cada transacción arranca con BEGIN IMMEDIATE: el bloqueo de
    escritura se toma al inicio, así las inscripciones concurrentes se
    serializan igual que con el FOR UPDATE de PostgreSQL.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    engine = create_engine(
        database_url,
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(engine, "connect")
    def _configurar_sqlite(dbapi_connection, connection_record):
        # Desactiva el BEGIN implícito de pysqlite; lo emite el evento "begin"
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


engine = crear_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """Crea todas las tablas definidas en Base.metadata"""
    import gimnasio.models  # noqa: F401  registra los modelos en Base

    Base.metadata.create_all(bind=engine)
    logger.info("Tablas verificadas/creadas")
