#!/usr/bin/env python3
"""
Pytest tests for the respondent path: login, token gate, quiz delivery and submission
"""

from datetime import timedelta
from unittest.mock import patch

import pytest
from jose import jwt

from app.core.config import settings
from app.core.security import RESPONDER_TOKEN_TYPE, create_access_token
from app.core.timeutils import utcnow
from app.models.credential import ResponderCredential
from app.models.response import Answer, QuizResponse
from app.repositories.response_repository import ResponseRepository


def _submit(client, quiz_id, headers, answers, **extra):
    body = {"answers": answers}
    body.update(extra)
    return client.post(f"/quizzes/{quiz_id}/submit", json=body, headers=headers)


def _perfect_answers(ids):
    return [
        {"question_id": ids["single"], "choice_ids": [ids["A"]]},
        {"question_id": ids["multi"], "choice_ids": [ids["Y"], ids["X"]]},
    ]


class TestResponderLogin:
    def test_wrong_password_is_unauthorized(self, client, sample_quiz, issue_credential):
        credential = issue_credential(sample_quiz["quiz"])
        response = client.post(
            "/responder/login",
            json={"username": credential["username"], "password": "not-the-password"},
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid username or password"

    def test_unknown_username_gets_same_message(self, client, sample_quiz):
        response = client.post(
            "/responder/login", json={"username": "nobody", "password": "whatever"}
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid username or password"

    @patch("app.services.responder_auth.dummy_verify")
    def test_unknown_username_still_pays_hash_cost(self, mock_dummy_verify, client, sample_quiz):
        response = client.post(
            "/responder/login", json={"username": "nobody", "password": "whatever"}
        )
        assert response.status_code == 401
        mock_dummy_verify.assert_called_once()

    @patch("app.services.responder_auth.dummy_verify")
    def test_known_username_verifies_real_hash(
        self, mock_dummy_verify, client, sample_quiz, issue_credential
    ):
        credential = issue_credential(sample_quiz["quiz"])
        response = client.post(
            "/responder/login",
            json={"username": credential["username"], "password": "not-the-password"},
        )
        assert response.status_code == 401
        mock_dummy_verify.assert_not_called()

    def test_expired_credential_is_forbidden(self, client, db, sample_quiz, issue_credential):
        credential = issue_credential(sample_quiz["quiz"])
        stored = db.get(ResponderCredential, credential["credential_id"])
        stored.expires_at = utcnow() - timedelta(minutes=1)
        db.commit()

        response = client.post(
            "/responder/login",
            json={"username": credential["username"], "password": credential["password"]},
        )
        assert response.status_code == 403
        assert "expired" in response.json()["detail"]

    def test_used_credential_cannot_log_in_again(
        self, client, sample_quiz, issue_credential
    ):
        credential = issue_credential(sample_quiz["quiz"])
        login = {"username": credential["username"], "password": credential["password"]}
        token = client.post("/responder/login", json=login).json()["token"]
        headers = {"Authorization": f"Bearer {token}"}
        assert _submit(client, sample_quiz["quiz"], headers, []).status_code == 200

        response = client.post("/responder/login", json=login)
        assert response.status_code == 403

    def test_token_is_separate_from_admin_secret(self, client, sample_quiz, issue_credential):
        credential = issue_credential(sample_quiz["quiz"])
        token = client.post(
            "/responder/login",
            json={"username": credential["username"], "password": credential["password"]},
        ).json()["token"]

        claims = jwt.decode(
            token,
            settings.RESPONDER_SECRET_KEY,
            algorithms=["HS256"],
            issuer=settings.JWT_ISSUER,
        )
        assert claims["quiz_id"] == sample_quiz["quiz"]
        assert claims["credential_id"] == credential["credential_id"]
        lifetime = claims["exp"] - claims["iat"]
        assert lifetime == settings.RESPONDER_TOKEN_EXPIRE_MINUTES * 60
        assert lifetime < settings.ADMIN_TOKEN_EXPIRE_MINUTES * 60


class TestSessionAuthenticator:
    def test_missing_header_is_unauthorized(self, client, sample_quiz):
        response = client.get(f"/quizzes/{sample_quiz['quiz']}")
        assert response.status_code == 401

    def test_non_bearer_scheme_is_unauthorized(self, client, sample_quiz):
        response = client.get(
            f"/quizzes/{sample_quiz['quiz']}", headers={"Authorization": "Basic abc"}
        )
        assert response.status_code == 401

    def test_garbage_token_is_unauthorized(self, client, sample_quiz):
        response = client.get(
            f"/quizzes/{sample_quiz['quiz']}",
            headers={"Authorization": "Bearer not.a.token"},
        )
        assert response.status_code == 401

    def test_unexpected_algorithm_is_unauthorized(
        self, client, sample_quiz, issue_credential
    ):
        credential = issue_credential(sample_quiz["quiz"])
        now = utcnow()
        token = jwt.encode(
            {
                "credential_id": credential["credential_id"],
                "quiz_id": sample_quiz["quiz"],
                "gen": 1,
                "typ": RESPONDER_TOKEN_TYPE,
                "iss": settings.JWT_ISSUER,
                "iat": now,
                "exp": now + timedelta(hours=1),
            },
            settings.RESPONDER_SECRET_KEY,
            algorithm="HS512",
        )
        response = client.get(
            f"/quizzes/{sample_quiz['quiz']}",
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 401

    def test_expired_token_is_unauthorized(self, client, sample_quiz, issue_credential):
        credential = issue_credential(sample_quiz["quiz"])
        token = create_access_token(
            {
                "credential_id": credential["credential_id"],
                "quiz_id": sample_quiz["quiz"],
                "gen": 1,
            },
            RESPONDER_TOKEN_TYPE,
            timedelta(minutes=-5),
        )
        response = client.get(
            f"/quizzes/{sample_quiz['quiz']}",
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 401

    def test_token_for_other_quiz_is_forbidden(
        self, client, admin_headers, responder_headers
    ):
        other = client.post(
            "/admin/quizzes", json={"title": "Other quiz"}, headers=admin_headers
        ).json()

        assert client.get(f"/quizzes/{other['id']}", headers=responder_headers).status_code == 403
        submit = _submit(client, other["id"], responder_headers, [])
        assert submit.status_code == 403

    def test_reissue_invalidates_old_token(
        self, client, sample_quiz, issue_credential, responder_headers
    ):
        issue_credential(sample_quiz["quiz"])

        response = client.get(f"/quizzes/{sample_quiz['quiz']}", headers=responder_headers)
        assert response.status_code == 401

    def test_revoked_credential_token_is_unauthorized(
        self, client, db, admin_headers, sample_quiz, responder_headers
    ):
        credential = db.query(ResponderCredential).filter_by(quiz_id=sample_quiz["quiz"]).one()
        client.delete(f"/admin/credentials/{credential.id}", headers=admin_headers)

        response = client.get(f"/quizzes/{sample_quiz['quiz']}", headers=responder_headers)
        assert response.status_code == 401


class TestQuizDelivery:
    def test_delivery_never_contains_correctness(self, client, sample_quiz, responder_headers):
        response = client.get(f"/quizzes/{sample_quiz['quiz']}", headers=responder_headers)

        assert response.status_code == 200
        assert "is_correct" not in response.text
        assert "isCorrect" not in response.text

        data = response.json()
        assert [q["text"] for q in data["questions"]] == ["Pick A", "Pick X and Y"]
        assert [c["text"] for c in data["questions"][0]["choices"]] == ["A", "B", "C"]
        for question in data["questions"]:
            for choice in question["choices"]:
                assert set(choice) == {"id", "text"}

    def test_delivery_of_missing_quiz_is_not_found(self, db, sample_quiz):
        from app.core.exceptions import NotFoundError
        from app.services.delivery import QuizDeliveryProjector

        with pytest.raises(NotFoundError):
            QuizDeliveryProjector(db).project(sample_quiz["quiz"] + 1000)


class TestSubmission:
    def test_perfect_submission(self, client, db, sample_quiz, responder_headers):
        response = _submit(
            client,
            sample_quiz["quiz"],
            responder_headers,
            _perfect_answers(sample_quiz),
            started_at="2020-01-01T00:00:00Z",
        )

        assert response.status_code == 200, response.text
        data = response.json()
        assert data["score"] == 100
        assert data["correct_answers"] == 2
        assert data["total_questions"] == 2
        assert data["correct_choices"][str(sample_quiz["single"])] == [sample_quiz["A"]]
        assert sorted(data["correct_choices"][str(sample_quiz["multi"])]) == sorted(
            [sample_quiz["X"], sample_quiz["Y"]]
        )

        db.expire_all()
        credential = db.query(ResponderCredential).filter_by(quiz_id=sample_quiz["quiz"]).one()
        assert credential.used is True
        assert credential.used_at is not None

        stored = db.query(QuizResponse).filter_by(quiz_id=sample_quiz["quiz"]).one()
        assert stored.score == 100
        assert stored.responder_username == credential.username
        assert stored.time_taken_seconds > 0
        assert len(stored.answers) == 2

    def test_wrong_submission_scores_zero(self, client, sample_quiz, responder_headers):
        response = _submit(
            client,
            sample_quiz["quiz"],
            responder_headers,
            [
                {"question_id": sample_quiz["single"], "choice_ids": [sample_quiz["B"]]},
                {"question_id": sample_quiz["multi"], "choice_ids": [sample_quiz["X"]]},
            ],
        )
        assert response.status_code == 200
        assert response.json()["score"] == 0
        assert response.json()["correct_answers"] == 0

    def test_second_submission_is_forbidden(self, client, db, sample_quiz, responder_headers):
        first = _submit(client, sample_quiz["quiz"], responder_headers, _perfect_answers(sample_quiz))
        assert first.status_code == 200

        second = _submit(client, sample_quiz["quiz"], responder_headers, _perfect_answers(sample_quiz))
        assert second.status_code == 403

        delivery = client.get(f"/quizzes/{sample_quiz['quiz']}", headers=responder_headers)
        assert delivery.status_code == 403

        db.expire_all()
        assert db.query(QuizResponse).count() == 1

    def test_foreign_question_is_rejected_without_writes(
        self, client, db, admin_headers, sample_quiz, responder_headers
    ):
        other = client.post(
            "/admin/quizzes",
            json={
                "title": "Other quiz",
                "questions": [
                    {
                        "text": "Elsewhere",
                        "type": "single",
                        "choices": [
                            {"text": "yes", "is_correct": True},
                            {"text": "no"},
                        ],
                    }
                ],
            },
            headers=admin_headers,
        ).json()
        foreign_question = other["questions"][0]

        response = _submit(
            client,
            sample_quiz["quiz"],
            responder_headers,
            [
                {"question_id": sample_quiz["single"], "choice_ids": [sample_quiz["A"]]},
                {
                    "question_id": foreign_question["id"],
                    "choice_ids": [foreign_question["choices"][0]["id"]],
                },
            ],
        )
        assert response.status_code == 400

        db.expire_all()
        assert db.query(QuizResponse).count() == 0
        assert db.query(Answer).count() == 0
        credential = db.query(ResponderCredential).filter_by(quiz_id=sample_quiz["quiz"]).one()
        assert credential.used is False

        # The credential is still good for a valid attempt
        retry = _submit(client, sample_quiz["quiz"], responder_headers, _perfect_answers(sample_quiz))
        assert retry.status_code == 200

    def test_empty_submission_is_accepted(self, client, sample_quiz, responder_headers):
        response = _submit(client, sample_quiz["quiz"], responder_headers, [])
        assert response.status_code == 200
        assert response.json()["score"] == 0
        assert response.json()["total_questions"] == 2

    def test_unparseable_started_at_is_ignored(self, client, db, sample_quiz, responder_headers):
        response = _submit(
            client,
            sample_quiz["quiz"],
            responder_headers,
            _perfect_answers(sample_quiz),
            started_at="yesterday-ish",
        )
        assert response.status_code == 200

        db.expire_all()
        stored = db.query(QuizResponse).one()
        assert stored.started_at is None
        assert stored.time_taken_seconds is None

    @patch.object(ResponseRepository, "add_answers", side_effect=RuntimeError("disk full"))
    def test_failed_write_rolls_back_credential_flip(
        self, mock_add_answers, client, db, sample_quiz, responder_headers
    ):
        response = _submit(client, sample_quiz["quiz"], responder_headers, _perfect_answers(sample_quiz))
        mock_add_answers.assert_called_once()
        assert response.status_code == 500
        assert "disk full" not in response.text

        db.expire_all()
        assert db.query(QuizResponse).count() == 0
        credential = db.query(ResponderCredential).filter_by(quiz_id=sample_quiz["quiz"]).one()
        assert credential.used is False

    def test_expired_deadline_aborts_submission(self, db, sample_quiz, issue_credential):
        from app.core.database import Deadline
        from app.core.exceptions import DeadlineExceeded
        from app.schemas.responder import QuizSubmission
        from app.services.responder_auth import ResponderClaims
        from app.services.submission import SubmissionService

        credential = issue_credential(sample_quiz["quiz"])
        claims = ResponderClaims(
            credential_id=credential["credential_id"], quiz_id=sample_quiz["quiz"]
        )

        with pytest.raises(DeadlineExceeded):
            SubmissionService(db).submit(
                claims, sample_quiz["quiz"], QuizSubmission(answers=[]), Deadline(0)
            )

        db.expire_all()
        assert db.query(QuizResponse).count() == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
