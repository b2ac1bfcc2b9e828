import pytest

from greenpoll.extensions import mail


def _register(client, username="greenfan", email="fan@example.com", password="correct-horse"):
    return client.post("/api/auth/register", json={"username": username, "email": email, "password": password})


def _login(client, email="fan@example.com", password="correct-horse"):
    return client.post("/api/auth/login", json={"email": email, "password": password})


@pytest.fixture
def logged_in(client):
    _register(client)
    response = _login(client)
    assert response.status_code == 200
    return response.get_json()["user"]


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.headers["Cache-Control"].startswith("no-store")


def test_register_sends_verification_email(client, services):
    with mail.record_messages() as outbox:
        response = _register(client)

    assert response.status_code == 201
    body = response.get_json()
    assert body["user"]["verified"] is False
    assert "password_hash" not in body["user"]

    token = services.verifications.get_for_email("fan@example.com")
    assert len(outbox) == 1
    assert outbox[0].recipients == ["fan@example.com"]
    assert token.id in outbox[0].body


def test_register_validation_error_envelope(client):
    _register(client)
    response = _register(client, email="other@example.com")

    assert response.status_code == 400
    error = response.get_json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["message"] == "Username is in use"
    assert error["field"] == "username"


def test_register_missing_fields(client):
    response = client.post("/api/auth/register", json={"username": "greenfan"})

    assert response.status_code == 400
    error = response.get_json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert "email" in error["details"]


def test_verify_account_flow(client, services):
    _register(client)
    token_id = services.verifications.get_for_email("fan@example.com").id

    assert client.post("/api/auth/verify_account", json={"verify_id": token_id}).status_code == 200
    again = client.post("/api/auth/verify_account", json={"verify_id": token_id})

    assert again.status_code == 400
    assert again.get_json()["error"]["code"] == "INVALID_TOKEN"
    _login(client)
    assert client.get("/api/users/me").get_json()["user"]["verified"] is True


def test_login_sets_session_cookie(client, logged_in):
    assert client.get_cookie("sessionID") is not None

    response = client.get("/api/users/me")
    assert response.status_code == 200
    assert response.get_json()["user"]["id"] == logged_in["id"]


def test_login_failure_is_generic(client):
    _register(client)
    wrong = _login(client, password="wrong-horse")
    unknown = _login(client, email="nobody@example.com")

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.get_json()["error"] == unknown.get_json()["error"]


def test_requires_login(client):
    response = client.get("/api/users/me")
    assert response.status_code == 401
    assert response.get_json()["error"]["code"] == "INVALID_CREDENTIALS"


def test_logout_ends_session(client, logged_in):
    assert client.post("/api/auth/logout").status_code == 200
    assert client.get("/api/users/me").status_code == 401


def test_stale_cookie_is_rejected(client, logged_in):
    client.set_cookie("sessionID", "not-a-session")
    assert client.get("/api/users/me").status_code == 401


def test_logout_everywhere(client, services, logged_in):
    services.users.login("fan@example.com", "correct-horse")

    assert client.post("/api/auth/logout_everywhere").status_code == 200
    assert services.sessions.get_user_sessions(logged_in["id"]) == []


def test_password_reset_flow(client, services):
    _register(client)

    with mail.record_messages() as outbox:
        response = client.post("/api/auth/request_password_reset", json={"email": "fan@example.com"})
    assert response.status_code == 200
    assert len(outbox) == 1

    reset_id = services.password_resets.get_for_email("fan@example.com").id
    exists = client.get("/api/auth/password_reset_exists", query_string={"reset_id": reset_id})
    assert exists.get_json() == {"exists": True}

    response = client.post("/api/auth/reset_password", json={"reset_id": reset_id, "new_password": "brand-new-pass"})
    assert response.status_code == 200
    assert _login(client, password="brand-new-pass").status_code == 200
    assert client.get(
        "/api/auth/password_reset_exists", query_string={"reset_id": reset_id}
    ).get_json() == {"exists": False}


def test_password_reset_request_does_not_disclose(client):
    _register(client)
    with mail.record_messages() as outbox:
        known = client.post("/api/auth/request_password_reset", json={"email": "fan@example.com"})
        unknown = client.post("/api/auth/request_password_reset", json={"email": "nobody@example.com"})

    assert known.get_json() == unknown.get_json()
    assert len(outbox) == 1


def test_change_username(client, logged_in):
    response = client.put("/api/users/me/username", json={"username": "renamed"})
    assert response.status_code == 200
    assert response.get_json()["user"]["username"] == "renamed"

    public = client.get(f"/api/users/{logged_in['id']}").get_json()["user"]
    assert public["username"] == "renamed"
    assert "email" not in public


def test_delete_account(client, logged_in):
    assert client.delete("/api/users/me").status_code == 200
    assert client.get(f"/api/users/{logged_in['id']}").status_code == 404


def test_create_poll_with_options(client, logged_in):
    response = client.post(
        "/api/polls/", json={"title": "Best tree?", "description": "Pick one", "options": ["Oak", "Birch"]}
    )

    assert response.status_code == 201
    poll = response.get_json()["poll"]
    assert poll["user_id"] == logged_in["id"]
    assert [o["value"] for o in poll["options"]] == ["Oak", "Birch"]


def test_create_poll_with_too_many_options_writes_nothing(client):
    _register(client)
    _login(client)
    response = client.post("/api/polls/", json={"title": "Too many", "options": list("abcdef")})

    assert response.status_code == 400
    assert response.get_json()["error"]["message"] == "Maximum number of poll options has been reached"
    assert client.get("/api/users/me/polls").get_json()["polls"] == []


def test_only_owner_can_edit_poll(client, logged_in):
    poll_id = client.post("/api/polls/", json={"title": "Mine"}).get_json()["poll"]["id"]
    client.post("/api/auth/logout")

    _register(client, username="intruder", email="intruder@example.com")
    _login(client, email="intruder@example.com")

    response = client.put(f"/api/polls/{poll_id}/title", json={"title": "Theirs"})
    assert response.status_code == 403
    assert response.get_json()["error"]["code"] == "PERMISSION_DENIED"
    assert client.delete(f"/api/polls/{poll_id}").status_code == 403
    assert client.post(f"/api/polls/{poll_id}/options", json={"value": "x"}).status_code == 403


def test_owner_manages_options(client, logged_in):
    poll_id = client.post("/api/polls/", json={"title": "Mine"}).get_json()["poll"]["id"]

    created = client.post(f"/api/polls/{poll_id}/options", json={"value": "Oak"})
    assert created.status_code == 201
    option_id = created.get_json()["option"]["id"]

    assert client.put(f"/api/options/{option_id}", json={"value": "Elm"}).get_json()["option"]["value"] == "Elm"
    assert client.get(f"/api/options/{option_id}/poll").get_json()["poll"]["id"] == poll_id
    assert client.delete(f"/api/options/{option_id}").status_code == 200
    assert client.get(f"/api/polls/{poll_id}/options").get_json()["options"] == []


def test_vote_and_revote(client, logged_in):
    poll = client.post("/api/polls/", json={"title": "Best tree?", "options": ["Oak", "Birch"]}).get_json()["poll"]
    oak, birch = (o["id"] for o in poll["options"])

    assert client.post("/api/votes/", json={"poll_option_id": oak}).status_code == 201
    response = client.post("/api/votes/", json={"poll_option_id": birch})
    assert response.status_code == 201

    votes = client.get(f"/api/polls/{poll['id']}/votes").get_json()["votes"]
    assert len(votes) == 1
    assert votes[0]["poll_option_id"] == birch

    voters = client.get(f"/api/polls/{poll['id']}/voters").get_json()["voters"]
    assert voters[0]["username"] == "greenfan"
    assert voters[0]["poll_option_value"] == "Birch"

    vote_id = response.get_json()["vote"]["id"]
    assert client.get(f"/api/votes/by_id/{vote_id}/poll").get_json()["poll"]["id"] == poll["id"]


def test_unvote(client, logged_in):
    poll = client.post("/api/polls/", json={"title": "Best tree?", "options": ["Oak"]}).get_json()["poll"]
    client.post("/api/votes/", json={"poll_option_id": poll["options"][0]["id"]})

    assert client.get(f"/api/votes/{poll['id']}").status_code == 200
    assert client.delete(f"/api/votes/{poll['id']}").status_code == 200
    assert client.delete(f"/api/votes/{poll['id']}").status_code == 200
    assert client.get(f"/api/votes/{poll['id']}").status_code == 404


def test_vote_rejects_non_integer_option(client, logged_in):
    response = client.post("/api/votes/", json={"poll_option_id": "1"})
    assert response.status_code == 400


def test_poll_not_found(client):
    response = client.get("/api/polls/999")
    assert response.status_code == 404
    assert response.get_json()["error"]["message"] == "Poll does not exist"
