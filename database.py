import logging
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """
    Storage client for the app.

    Built once at startup (see main.lifespan), closed on shutdown and
    handed to request handlers through ``get_db``.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None

    def connect(self) -> None:
        if self.engine is not None:
            return

        if self.url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            # in-memory sqlite lives on one connection
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool
            self.engine = create_engine(self.url, echo=self.echo, **kwargs)
        else:
            self.engine = create_engine(self.url, echo=self.echo, pool_pre_ping=True)

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        # tables are registered on Base by the model imports in main.py
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database connected (%s)", self.engine.url.get_backend_name())

    def session(self) -> Session:
        if self.SessionLocal is None:
            raise RuntimeError("Database.connect() has not been called")
        return self.SessionLocal()

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database connection closed")
        self.engine = None
        self.SessionLocal = None


def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
