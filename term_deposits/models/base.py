"""
Database engine, session management, and base model.

Every model inherits from Base. Every request gets a session
from get_db().
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from term_deposits.config import get_settings

settings = get_settings()

# pool_pre_ping=True tests connections before using them, so a
# database restart does not surface as a failed settlement.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
)

# autocommit=False: callers decide when a unit of work is saved.
# autoflush=False: SQL is only sent on explicit flush or commit.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


def get_db():
    """
    Provide a database session for a single request.

    The try/finally guarantees the session is closed even when
    the endpoint raises, so connections never leak from the pool.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
