from cvchat.errors import DependencyFailure
from cvchat.models import AppEvent
from cvchat.services.prompts import FALLBACK_SENTENCE, REFUSAL_SENTENCE
from tests.conftest import SAMPLE_CV


def evidence_bound_model(prompt, question):
    """Answers only when the asked-about term appears in the embedded documents."""
    documents = prompt.split("DOCUMENTS:", 1)[1]
    term = question.rstrip("?").split()[-1]
    if term.lower() in documents.lower():
        return f"Yes, the documents mention {term}.\n- Source: CV"
    return REFUSAL_SENTENCE


def test_chat_answers_from_profile_evidence(client, fake_llm, make_profile):
    token = make_profile(additional_text="Organised a PyCon sprint.")
    fake_llm.queue(evidence_bound_model, evidence_bound_model)

    known = client.post("/api/chat", json={"token": token, "question": "Does John know PostgreSQL?"})
    notes = client.post("/api/chat", json={"token": token, "question": "Did he attend PyCon?"})

    assert known.status_code == 200
    assert known.get_json() == {"answer": "Yes, the documents mention PostgreSQL.\n- Source: CV"}
    assert notes.get_json()["answer"].startswith("Yes")
    assert fake_llm.calls[0]["question"] == "Does John know PostgreSQL?"


def test_question_outside_the_documents_gets_exact_refusal(client, fake_llm, make_profile):
    token = make_profile()
    fake_llm.queue("I cannot answer that based on the provided documents. The CV does not list colours.")

    response = client.post("/api/chat", json={"token": token, "question": "What is his favourite colour?"})

    assert response.status_code == 200
    assert response.get_json() == {"answer": REFUSAL_SENTENCE}


def test_chat_falls_back_when_model_fails(app, client, fake_llm, make_profile):
    token = make_profile()
    fake_llm.queue(DependencyFailure(detail="OpenAI error: timed out"))

    response = client.post("/api/chat", json={"token": token, "question": "Where did he study?"})

    assert response.status_code == 200
    assert response.get_json() == {"answer": FALLBACK_SENTENCE}
    with app.app_context():
        event = AppEvent.query.filter_by(type="chat_fallback").one()
        assert event.cv_token == token
        assert event.context["location"] == "api/chat"


def test_chat_request_validation(client, fake_llm, make_profile):
    token = make_profile()

    assert client.post("/api/chat", json={"token": token}).get_json() == {"error": "Missing token or question"}
    assert client.post("/api/chat", json={"question": "Hi?"}).status_code == 400
    assert client.post("/api/chat", json={"token": token, "question": "   "}).status_code == 400
    too_long = client.post("/api/chat", json={"token": token, "question": "x" * 4001})
    assert too_long.status_code == 400

    unknown = client.post("/api/chat", json={"token": "no-such-token", "question": "Hi?"})
    assert unknown.status_code == 404
    assert unknown.get_json() == {"error": "CV not found"}
    assert fake_llm.calls == []


def test_owned_profile_is_private_to_its_owner(client, fake_llm, make_profile, register):
    token = make_profile()
    _, owner_headers = register(token=token)
    _, other_headers = register(email="other@example.com")
    fake_llm.queue("Python, Flask and PostgreSQL.")

    anonymous = client.post("/api/chat", json={"token": token, "question": "Skills?"})
    stranger = client.post("/api/chat", json={"token": token, "question": "Skills?"}, headers=other_headers)
    owner = client.post("/api/chat", json={"token": token, "question": "Skills?"}, headers=owner_headers)

    assert anonymous.status_code == 403
    assert anonymous.get_json() == {"error": "Forbidden"}
    assert stranger.status_code == 403
    assert owner.status_code == 200
    assert len(fake_llm.calls) == 1


def test_public_chat_uses_latest_profile_of_slug(client, fake_llm, make_profile, register):
    user, _ = register(name="Jane Roe")
    make_profile(cv_data={**SAMPLE_CV, "skills": ["COBOL"]}, user_id=user["id"])
    make_profile(cv_data={**SAMPLE_CV, "skills": ["Rust"]}, user_id=user["id"])
    fake_llm.queue(evidence_bound_model, evidence_bound_model)

    rust = client.post("/api/public-chat", json={"publicSlug": "JANE-ROE", "question": "Does she know Rust?"})
    cobol = client.post("/api/public-chat", json={"publicSlug": "jane-roe", "question": "Does she know COBOL?"})

    assert user["publicSlug"] == "jane-roe"
    assert rust.get_json()["answer"].startswith("Yes")
    assert cobol.get_json() == {"answer": REFUSAL_SENTENCE}


def test_public_chat_errors_and_fallback(client, fake_llm, make_profile, register):
    user, _ = register(name="Jane Roe")
    make_profile(user_id=user["id"])

    missing = client.post("/api/public-chat", json={"question": "Hi?"})
    assert missing.status_code == 400
    assert missing.get_json() == {"error": "Missing publicSlug or question"}

    unknown = client.post("/api/public-chat", json={"publicSlug": "nobody", "question": "Hi?"})
    assert unknown.status_code == 404

    fake_llm.queue(DependencyFailure(detail="HTTP 503"))
    failed = client.post("/api/public-chat", json={"publicSlug": "jane-roe", "question": "Hi?"})
    assert failed.status_code == 200
    assert failed.get_json() == {"answer": FALLBACK_SENTENCE}


def test_stale_session_header_still_reaches_anonymous_profile(client, fake_llm, make_profile, register):
    _, headers = register()
    client.post("/api/auth/logout", headers=headers)
    token = make_profile()
    fake_llm.queue("Python, Flask and PostgreSQL.")

    response = client.post("/api/chat", json={"token": token, "question": "Skills?"}, headers=headers)

    assert response.status_code == 200
    assert response.get_json() == {"answer": "Python, Flask and PostgreSQL."}
    assert client.get(f"/api/cv/{token}", headers=headers).status_code == 200
