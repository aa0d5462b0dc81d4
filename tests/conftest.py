# tests/conftest.py
import copy
import json
import os
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ---- test env (set before the app is imported) ----
os.environ.setdefault("ENV", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")

from app.core.deps import get_evaluator  # noqa: E402
from app.main import app  # noqa: E402
from app.services.evaluator import PhotoEvaluator  # noqa: E402

SAMPLE_RESULT: Dict[str, Any] = {
    "overall_score": 7.5,
    "creativity_score": 8,
    "composition_score": 7,
    "technical_score": 6.5,
    "rules": {
        "rule_of_thirds": {"applied": True, "score": 8, "comment": "Sujeto en el tercio izquierdo."},
        "golden_ratio": {"applied": False, "score": 4, "comment": "Sin espiral aparente."},
        "leading_lines": {"applied": True, "score": 7.5, "comment": "La carretera guía la mirada."},
        "light_and_shadow": {"score": 6, "comment": "Contraluz algo quemado."},
    },
    "text_explanation": "Fotografía equilibrada con un punto de vista original.",
}

SAMPLE_IMAGE = "data:image/jpeg;base64,/9j/4AAQSkZJRgABAQAAAQABAAD/2wBDAAgGBgcGBQgHBwcJCQgKDBQNDAsLDBkSEw8UHR"


def text_response(text: str) -> SimpleNamespace:
    """Responses API envelope carrying one output_text part."""
    part = SimpleNamespace(type="output_text", text=text, annotations=[])
    return SimpleNamespace(output=[SimpleNamespace(type="message", role="assistant", content=[part])])


class FakeResponses:
    """Stands in for ``AsyncOpenAI().responses``; records every create() call."""

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.handler: Callable[[Dict[str, Any]], Any] = lambda kwargs: text_response(json.dumps(SAMPLE_RESULT))

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        result = self.handler(kwargs)
        if isinstance(result, Exception):
            raise result
        return result


class FakeOpenAI:
    envelope = staticmethod(text_response)

    def __init__(self) -> None:
        self.responses = FakeResponses()
        self.closed = False

    def reply_with(self, response: Any) -> None:
        self.responses.handler = lambda kwargs: response

    def reply_text(self, text: str) -> None:
        self.reply_with(text_response(text))

    def reply_json(self, obj: Any) -> None:
        self.reply_text(json.dumps(obj))

    def respond(self, fn: Callable[[Dict[str, Any]], Any]) -> None:
        self.responses.handler = fn

    def sent_parts(self, index: int = -1) -> List[Dict[str, Any]]:
        return self.responses.calls[index]["input"][0]["content"]

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def sample_result() -> Dict[str, Any]:
    return copy.deepcopy(SAMPLE_RESULT)


@pytest.fixture
def sample_image() -> str:
    return SAMPLE_IMAGE


@pytest.fixture
def fake_openai() -> FakeOpenAI:
    return FakeOpenAI()


@pytest.fixture
def evaluator(fake_openai: FakeOpenAI) -> PhotoEvaluator:
    return PhotoEvaluator(fake_openai)  # type: ignore[arg-type]


@pytest.fixture
def use_evaluator():
    """Install a PhotoEvaluator for the duration of one test."""
    def _install(ev: Optional[PhotoEvaluator]) -> None:
        app.dependency_overrides[get_evaluator] = lambda: ev
    yield _install
    app.dependency_overrides.pop(get_evaluator, None)


@pytest_asyncio.fixture
async def client(evaluator: PhotoEvaluator, use_evaluator):
    """ASGITransport mounts the app directly; no server, no lifespan."""
    use_evaluator(evaluator)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
