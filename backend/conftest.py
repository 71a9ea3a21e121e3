"""
Pytest configuration: in-memory database and a stubbed LLM for every test.
"""

import json
import os

# Must be set before conceptmap.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from conceptmap.api.routes import get_extractor
from conceptmap.db.models import Base
from conceptmap.db.session import get_db
from conceptmap.main import app
from conceptmap.pipeline.analyzer import ConceptExtractor

SAMPLE_CONCEPTS = [
    {"id": "1", "text": "Cause", "type": "main", "definition": "What starts it",
     "connections": [{"targetId": "2", "label": "leads to"}]},
    {"id": "2", "text": "Effect", "type": "sub", "definition": "What follows", "connections": []},
]


class StubLLMClient:
    def __init__(self, reply):
        self.reply = reply
        self.calls = []

    def generate(self, messages):
        self.calls.append(messages)
        return self.reply


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def llm_client():
    return StubLLMClient(json.dumps(SAMPLE_CONCEPTS))


@pytest.fixture
def client(db_session, llm_client):
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_extractor] = lambda: ConceptExtractor(llm_client)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
