"""
Shared pytest fixtures: an isolated SQLite database per test, a TestClient
wired to it, an organizer account and a two-question sample quiz.
"""

import os

# Must be set before app modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import app.models  # noqa: F401
from app.core.database import Base, build_engine, get_db
from app.main import app as fastapi_app
from app.models.quiz import QuestionType
from app.schemas.quiz import ChoiceCreate, QuestionCreate, QuizCreate
from app.services.admin_auth import AdminAuthService
from app.services.quiz import QuizService

ADMIN_USERNAME = "organizer"
ADMIN_PASSWORD = "organizer-pass"


@pytest.fixture
def engine(tmp_path):
    # File-backed so separate connections (threads) share one database
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    yield TestClient(fastapi_app)
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def admin_id(db):
    return AdminAuthService(db).create_admin(ADMIN_USERNAME, ADMIN_PASSWORD).id


@pytest.fixture
def other_admin_id(db):
    return AdminAuthService(db).create_admin("someone-else", "other-pass").id


@pytest.fixture
def admin_headers(client, admin_id):
    response = client.post(
        "/admin/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def sample_quiz(db, admin_id):
    """
    One single-choice question (A correct, B, C) and one multi-choice
    question (X and Y correct, Z wrong). Returns IDs keyed by label.
    """
    quiz = QuizService(db).create_quiz(
        admin_id,
        QuizCreate(
            title="Sample quiz",
            description="Used across the test-suite",
            questions=[
                QuestionCreate(
                    text="Pick A",
                    type=QuestionType.SINGLE,
                    choices=[
                        ChoiceCreate(text="A", is_correct=True),
                        ChoiceCreate(text="B"),
                        ChoiceCreate(text="C"),
                    ],
                ),
                QuestionCreate(
                    text="Pick X and Y",
                    type=QuestionType.MULTI,
                    choices=[
                        ChoiceCreate(text="X", is_correct=True),
                        ChoiceCreate(text="Y", is_correct=True),
                        ChoiceCreate(text="Z"),
                    ],
                ),
            ],
        ),
    )
    single, multi = quiz.questions
    ids = {"quiz": quiz.id, "single": single.id, "multi": multi.id}
    for question in (single, multi):
        for choice in question.choices:
            ids[choice.text] = choice.id
    return ids


@pytest.fixture
def issue_credential(client, admin_headers):
    def _issue(quiz_id, **body):
        response = client.post(
            f"/admin/quizzes/{quiz_id}/credentials", json=body, headers=admin_headers
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _issue


@pytest.fixture
def responder_headers(client, sample_quiz, issue_credential):
    credential = issue_credential(sample_quiz["quiz"])
    response = client.post(
        "/responder/login",
        json={"username": credential["username"], "password": credential["password"]},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}
