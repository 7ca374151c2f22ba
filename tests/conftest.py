import json

import pytest
from fastapi.testclient import TestClient

from resume_optimizer.main import app, get_llm_client, get_pdf_extractor, limiter

WELL_FORMED = {
    "score": 72,
    "keywords": ["Kubernetes", "CI/CD", "Terraform"],
    "suggestions": ["Quantify impact in each bullet", "Add a skills section"],
    "optimized_text": "Jane Doe\nSenior Platform Engineer",
}


class StubChatClient:
    """Plays back canned replies (or raises canned errors) in order."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    async def complete(self, model, messages, *, temperature, max_tokens):
        self.calls.append(
            {
                "model": model,
                "messages": messages,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture(autouse=True)
def reset_app():
    limiter.reset()
    yield
    app.dependency_overrides.clear()
    app.state.llm_client = None
    limiter.reset()


@pytest.fixture
def stub_client():
    return StubChatClient(json.dumps(WELL_FORMED))


@pytest.fixture
def client(stub_client):
    app.dependency_overrides[get_llm_client] = lambda: stub_client
    return TestClient(app)


@pytest.fixture
def use_extractor():
    """Install a fake PDF text extractor on the app."""

    def install(fn):
        app.dependency_overrides[get_pdf_extractor] = lambda: fn

    return install
