import pytest

import config as cfg
from app import create_app
from simulation import ROIInputs


@pytest.fixture
def app():
    app = create_app({"TESTING": True, "SQLALCHEMY_DATABASE_URI": "sqlite://"})
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def default_payload():
    return dict(cfg.DEFAULT_INPUTS)


@pytest.fixture
def default_inputs():
    return ROIInputs.from_mapping(cfg.DEFAULT_INPUTS)
