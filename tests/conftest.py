import os

# use the tests/test.env config fle
# flake8: noqa: E402

os.environ["CONFIG"] = os.path.abspath(
    os.path.join(os.path.dirname(os.path.dirname(__file__)), "tests/test.env")
)

import pytest

from app import config
from app.db import Session, engine
from app.models import Base
from server import create_app

app = create_app()
app.config["TESTING"] = True
app.config["SERVER_NAME"] = "mailhop.lan"


@pytest.fixture
def flask_app():
    yield app


@pytest.fixture
def flask_client():
    Base.metadata.create_all(engine)

    with app.app_context():
        api_key = config.MAILHOP_API_KEY
        try:
            client = app.test_client()
            yield client
        finally:
            # some tests enable the api key
            config.MAILHOP_API_KEY = api_key
            Session.rollback()
            Session.remove()
            Base.metadata.drop_all(engine)
