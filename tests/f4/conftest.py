"""Fixtures for F4 tests - Web API and CLI."""

import pytest
from fastapi.testclient import TestClient

from pathwise.web.api import create_app
from pathwise.web.deps import get_admin_client_factory, get_llm_client, get_store_client


@pytest.fixture
def api(store, llm, tmp_path, monkeypatch):
    """App wired to the in-memory store and LLM doubles."""
    monkeypatch.chdir(tmp_path)
    app = create_app()
    app.dependency_overrides[get_store_client] = lambda: store
    app.dependency_overrides[get_admin_client_factory] = lambda: (lambda: store)
    app.dependency_overrides[get_llm_client] = lambda: llm
    return app


@pytest.fixture
def client(api):
    """Create test client."""
    return TestClient(api)


@pytest.fixture
def learner_user(store):
    return store.add_user("ada@example.com", password="secret123", full_name="Ada")


@pytest.fixture
def headers(learner_user):
    """Authorization header of the signed-in learner."""
    return {"Authorization": f"Bearer token-{learner_user.id}"}


@pytest.fixture
def admin_headers(store):
    admin = store.add_user("admin@example.com", is_admin=True)
    return {"Authorization": f"Bearer token-{admin.id}"}


@pytest.fixture
def onboarded(client, headers):
    """Learner who went through onboarding; returns the created roadmap."""
    response = client.post(
        "/api/onboarding/roadmap",
        json={
            "goal": "Learn Python",
            "questions": [{"question": "Level?", "options": ["Beginner"]}],
            "answers": {"Level?": "Beginner"},
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["roadmap"]
