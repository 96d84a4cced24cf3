"""Shared pytest fixtures for the Digitora test suite."""

from __future__ import annotations

import pytest

from app import create_app
from config import Config
from models.catalog import Category, Course, Level
from services.storage import MemoryStore


def make_course(course_id: str = "c1", **overrides) -> Course:
    course: Course = {
        "id": course_id,
        "title": f"Course {course_id}",
        "description": "A course.",
        "price": 49.99,
        "category": Category.CRYPTO,
        "level": Level.BEGINNER,
        "rating": 4.5,
        "students": 100,
        "downloads": 10,
        "image": "https://example.com/img.png",
        "tags": [],
        "downloadUrl": f"https://files.example.com/{course_id}.zip",
    }
    course.update(overrides)  # type: ignore[typeddict-item]
    return course


class FakeGenerator:
    """Records prompts and returns a canned reply (or raises)."""

    def __init__(self, reply: str = "Try Crypto Foundations.", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def generate(self, system_prompt: str, user_text: str) -> str:
        self.calls.append((system_prompt, user_text))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def app(tmp_path, generator):
    class TestConfig(Config):
        TESTING = True
        SECRET_KEY = "test-secret"
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{(tmp_path / 'test.db').as_posix()}"
        SQLALCHEMY_ECHO = False
        ADMIN_PASSWORD = "admin123"
        STRIPE_API_KEY = ""
        STRIPE_WEBHOOK_SECRET = "whsec_test"
        GEMINI_API_KEY = ""
        ADVISOR_GENERATOR = generator

    return create_app(TestConfig)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    resp = client.post("/admin/login", data={"password": "admin123"})
    assert resp.status_code == 302
    return client
