import logging

from sqlalchemy.exc import OperationalError

from career_coach.ai.errors import OtherCallError, QuotaExceeded, RateLimited, ServerError
from career_coach.models import AIInteraction
from career_coach.services.ai_calls import Generation, store_ai_interaction

from conftest import USER_HEADERS


def _onboard(client, fake_ai, skills=("React", "Node")):
    fake_ai.gemini_script = ['{"growthRate": 5, "demandLevel": "HIGH", "topSkills": ["React"]}']
    r = client.put("/user", json={"industry": "software", "experience": 5, "skills": list(skills)},
                   headers=USER_HEADERS)
    assert r.status_code == 200


BODY = {"job_title": "Frontend Engineer", "company_name": "ACME Corp", "job_description": "Build web apps"}


def test_generate_cover_letter_with_ai(client, fake_ai):
    _onboard(client, fake_ai)
    fake_ai.chat_script = ["Dear ACME, hire me."]

    r = client.post("/cover-letters", json=BODY, headers=USER_HEADERS)
    assert r.status_code == 200
    data = r.json()
    assert data["content"] == "Dear ACME, hire me."
    assert data["status"] == "completed"
    prompt = fake_ai.chat_calls[-1][1]["content"]
    assert "Frontend Engineer" in prompt and "React, Node" in prompt


def test_quota_exhaustion_uses_template(client, fake_ai):
    _onboard(client, fake_ai)
    fake_ai.chat_script = [QuotaExceeded(status=429, code="insufficient_quota")]

    r = client.post("/cover-letters", json=BODY, headers=USER_HEADERS)
    assert r.status_code == 200
    content = r.json()["content"]
    for expected in ("Frontend Engineer", "ACME Corp", "React and Node", "Dev Local"):
        assert expected in content
    # quota errors are not retried
    assert len(fake_ai.chat_calls) == 1

    listed = client.get("/cover-letters", headers=USER_HEADERS).json()
    assert [c["id"] for c in listed] == [r.json()["id"]]


def test_rate_limit_retried_then_template(client, fake_ai, settings):
    _onboard(client, fake_ai)
    fake_ai.chat_script = [RateLimited(status=429)]

    r = client.post("/cover-letters", json=BODY, headers=USER_HEADERS)
    assert r.status_code == 200
    assert r.json()["content"].startswith("[AI Service Temporarily Unavailable")
    assert len(fake_ai.chat_calls) == settings.max_retries + 1


def test_transient_error_recovers(client, fake_ai):
    _onboard(client, fake_ai)
    fake_ai.chat_script = [ServerError(status=500), "Recovered letter"]

    r = client.post("/cover-letters", json=BODY, headers=USER_HEADERS)
    assert r.status_code == 200
    assert r.json()["content"] == "Recovered letter"
    assert len(fake_ai.chat_calls) == 2


def test_terminal_error_surfaces(client, fake_ai):
    _onboard(client, fake_ai)
    fake_ai.chat_script = [OtherCallError("API call failed: 401 bad key", status=401)]

    r = client.post("/cover-letters", json=BODY, headers=USER_HEADERS)
    assert r.status_code == 502
    assert "Failed to generate cover letter" in r.json()["detail"]
    assert client.get("/cover-letters", headers=USER_HEADERS).json() == []


def test_get_and_delete_cover_letter(client, fake_ai):
    _onboard(client, fake_ai)
    created = client.post("/cover-letters", json=BODY, headers=USER_HEADERS).json()

    r = client.get(f"/cover-letters/{created['id']}", headers=USER_HEADERS)
    assert r.status_code == 200
    assert r.json()["company_name"] == "ACME Corp"

    other_user = {"X-User-Id": "someone_else"}
    assert client.get(f"/cover-letters/{created['id']}", headers=other_user).status_code == 404

    assert client.delete(f"/cover-letters/{created['id']}", headers=USER_HEADERS).status_code == 200
    assert client.get(f"/cover-letters/{created['id']}", headers=USER_HEADERS).status_code == 404
    assert client.delete(f"/cover-letters/{created['id']}", headers=USER_HEADERS).status_code == 404


def test_requires_user(client):
    r = client.post("/cover-letters", json=BODY)
    assert r.status_code == 401


def test_cover_letters_listed_newest_first(client, fake_ai):
    _onboard(client, fake_ai)
    fake_ai.chat_script = ["first letter", "second letter"]
    client.post("/cover-letters", json=BODY, headers=USER_HEADERS)
    client.post("/cover-letters", json=BODY, headers=USER_HEADERS)

    listed = client.get("/cover-letters", headers=USER_HEADERS).json()
    assert [c["content"] for c in listed] == ["second letter", "first letter"]


def _logged(db_session, interaction_type):
    return db_session.query(AIInteraction).filter(AIInteraction.interaction_type == interaction_type).all()


def test_successful_generation_is_logged(client, fake_ai, db_session, settings):
    _onboard(client, fake_ai)
    fake_ai.chat_script = ["Dear ACME, hire me."]
    client.post("/cover-letters", json=BODY, headers=USER_HEADERS)

    [row] = _logged(db_session, "cover_letter")
    assert row.used_fallback is False
    assert row.model_used == settings.openai_model
    assert row.error_kind is None
    assert row.response == "Dear ACME, hire me."
    assert "ACME Corp" in row.prompt


def test_template_generation_is_logged_with_error_kind(client, fake_ai, db_session):
    _onboard(client, fake_ai)
    fake_ai.chat_script = [QuotaExceeded(status=429, code="insufficient_quota")]
    client.post("/cover-letters", json=BODY, headers=USER_HEADERS)

    [row] = _logged(db_session, "cover_letter")
    assert row.used_fallback is True
    assert row.model_used == "template"
    assert row.error_kind == "quota_exceeded"
    assert row.response.startswith("[AI Service Temporarily Unavailable")


def test_interaction_log_failure_does_not_raise(client, db_session, monkeypatch, caplog):
    def broken_commit():
        raise OperationalError("INSERT INTO ai_interactions", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db_session, "commit", broken_commit)
    with caplog.at_level(logging.ERROR, logger="career_coach.services.ai_calls"):
        store_ai_interaction(
            db_session, user_id="u1", interaction_type="cover_letter",
            prompt="p", generation=Generation(result="text"), model="gpt-4o-mini",
        )

    assert "Failed to store AI interaction" in caplog.text
    assert db_session.query(AIInteraction).count() == 0
