import sqlalchemy
from sqlalchemy import create_engine
from sqlalchemy.orm import scoped_session
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import config


if config.DB_URI.startswith("sqlite"):
    # a single shared connection so an in-memory database survives across sessions
    engine = create_engine(
        config.DB_URI,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    engine = create_engine(
        config.DB_URI, connect_args={"application_name": config.DB_CONN_NAME}
    )

Session = scoped_session(sessionmaker(bind=engine))

# Session is actually a proxy, more info on
# https://docs.sqlalchemy.org/en/14/orm/contextual.html?highlight=scoped_session#implicit-method-access
Session: sqlalchemy.orm.Session
