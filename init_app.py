from app.db import engine
from app.log import LOG
from app.models import Base


def init_db():
    """Create the alias and email_log tables if they don't exist"""
    LOG.i("create tables %s", list(Base.metadata.tables))
    Base.metadata.create_all(engine)


if __name__ == "__main__":
    init_db()
