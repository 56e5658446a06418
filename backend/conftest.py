import os

# Must be set before any app module reads app.config
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SAVED_INDICATOR_SECONDS", "0")
os.environ.setdefault("DB_CONNECT_RETRIES", "1")
os.environ.setdefault("DB_CONNECT_DELAY", "0")

import pytest

from app.db.models import Base
from app.db.repository import ArchitectureRepository
from app.db.session import SessionLocal, engine
from app.editor.mutations import GraphEditor
from app.graph.synthesizer import synthesize_architecture


MINIMAL_SCHEMA = {
    "schemas": [{"name": "users"}, {"name": "orders"}],
    "analysis": {"scalingInsights": {"expectedLoad": "Medium"}},
}
MINIMAL_ENDPOINTS = {"endpoints": [{"group": "Users", "endpoints": [{"path": "/users"}]}]}

FULL_SCHEMA = {
    "schemas": [{"name": "users"}, {"name": "orders"}, {"name": "products"}],
    "analysis": {
        "scalingInsights": {"expectedLoad": "High"},
        "databaseRecommendations": [{"name": "MySQL"}],
    },
}
FULL_ENDPOINTS = {
    "endpoints": [
        {"group": "Auth", "endpoints": [{"path": "/login"}, {"path": "/logout"}]},
        {"group": "Users", "endpoints": [{"path": "/users"}]},
    ]
}


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def repository(db):
    return ArchitectureRepository(SessionLocal)


@pytest.fixture
def minimal_graph():
    return synthesize_architecture(MINIMAL_SCHEMA, MINIMAL_ENDPOINTS, project_name="Shop")


@pytest.fixture
def full_graph():
    return synthesize_architecture(FULL_SCHEMA, FULL_ENDPOINTS, project_name="Shop")


@pytest.fixture
def editor(minimal_graph):
    return GraphEditor(minimal_graph)
