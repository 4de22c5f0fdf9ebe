import pytest
from flask import Request
from werkzeug.test import EnvironBuilder

from seed_functions.app import create_router
from seed_functions.config import Settings
from seed_functions.seed_data.generators import fake
from tests.mock_firestore import MockFirestore

SEED_KEY = 'test-seed-key'


@pytest.fixture(autouse=True)
def seeded_faker():
    fake.seed_instance(1234)
    yield fake


@pytest.fixture
def db():
    return MockFirestore()


@pytest.fixture
def settings():
    return Settings(seed_key=SEED_KEY)


@pytest.fixture
def router(db, settings):
    return create_router(db, settings)


@pytest.fixture
def make_request():
    def _make_request(path='/', method='GET', json=None, query=None, headers=None):
        builder = EnvironBuilder(
            path=path,
            method=method,
            json=json,
            query_string=query,
            headers=headers,
        )
        return Request(builder.get_environ())
    return _make_request
