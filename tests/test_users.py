import pytest

from greenpoll.errors import InvalidCredentials, NotFound, ValidationError


def test_create_user_is_unverified(services):
    user = services.users.create_user("greenfan", "fan@example.com", "correct-horse")

    assert user.id is not None
    assert user.verified is False
    assert services.users.get_user_by_username("greenfan").id == user.id
    assert services.users.get_user_by_email("fan@example.com").id == user.id


def test_password_is_not_stored_in_clear(services):
    user = services.users.create_user("greenfan", "fan@example.com", "correct-horse")
    assert user.password_hash != "correct-horse"
    assert services.hasher.verify("correct-horse", user.password_hash)


@pytest.mark.parametrize("username, ok", [("ab", False), ("abc", True), ("a" * 63, True), ("a" * 64, False)])
def test_username_length_bounds(services, username, ok):
    if ok:
        services.users.create_user(username, "fan@example.com", "correct-horse")
    else:
        with pytest.raises(ValidationError) as exc:
            services.users.create_user(username, "fan@example.com", "correct-horse")
        assert exc.value.message == "Username must be between 3 and 63 characters"
        assert exc.value.field == "username"


def test_password_length_bounds(services):
    with pytest.raises(ValidationError) as exc:
        services.users.create_user("greenfan", "fan@example.com", "short")
    assert exc.value.message == "Password must be between 8 and 255 characters"

    services.users.create_user("greenfan", "fan@example.com", "p" * 255)


def test_email_length_bounds(services):
    with pytest.raises(ValidationError) as exc:
        services.users.create_user("greenfan", "a@b", "correct-horse")
    assert exc.value.field == "email"


def test_taken_username_reported_before_length_errors(services, make_user):
    make_user(username="taken")

    with pytest.raises(ValidationError) as exc:
        # Email and password are both invalid too; the taken username wins
        services.users.create_user("taken", "x", "y")
    assert exc.value.message == "Username is in use"


def test_taken_email_reported_before_length_errors(services, make_user):
    make_user(email="fan@example.com")

    with pytest.raises(ValidationError) as exc:
        services.users.create_user("ab", "fan@example.com", "y")
    assert exc.value.message == "Email is in use"


def test_failed_create_writes_nothing(services):
    with pytest.raises(ValidationError):
        services.users.create_user("greenfan", "fan@example.com", "short")
    assert not services.users.user_exists_for_username("greenfan")


def test_login_opens_session(services, make_user):
    user = make_user(email="fan@example.com")

    session = services.users.login("fan@example.com", "correct-horse")

    assert session.user_id == user.id
    assert services.sessions.get_user_by_session_id(session.id).id == user.id


def test_login_failures_are_indistinguishable(services, make_user):
    make_user(email="fan@example.com")

    with pytest.raises(InvalidCredentials) as wrong_password:
        services.users.login("fan@example.com", "wrong-horse")
    with pytest.raises(InvalidCredentials) as unknown_email:
        services.users.login("nobody@example.com", "correct-horse")

    assert wrong_password.value.message == unknown_email.value.message
    assert wrong_password.value.kind == unknown_email.value.kind


def test_set_username(services, make_user):
    user = make_user(username="before")
    services.users.set_username(user.id, "after")
    assert services.users.get_user(user.id).username == "after"


def test_set_username_to_own_value_is_rejected(services, make_user):
    user = make_user(username="greenfan")
    with pytest.raises(ValidationError, match="Username is in use"):
        services.users.set_username(user.id, "greenfan")


def test_set_email_rejects_taken(services, make_user):
    make_user(email="one@example.com")
    user = make_user(email="two@example.com")
    with pytest.raises(ValidationError, match="Email is in use"):
        services.users.set_email(user.id, "one@example.com")


def test_set_password_then_login(services, make_user):
    user = make_user(email="fan@example.com")
    services.users.set_password(user.id, "new-password")

    services.users.login("fan@example.com", "new-password")
    with pytest.raises(InvalidCredentials):
        services.users.login("fan@example.com", "correct-horse")


def test_set_password_enforces_length(services, make_user):
    user = make_user()
    with pytest.raises(ValidationError):
        services.users.set_password(user.id, "short")


def test_get_unknown_user(services):
    with pytest.raises(NotFound, match="User does not exist"):
        services.users.get_user(999)


def test_delete_user_cascades(services, make_user, make_poll):
    owner = make_user()
    voter = make_user()
    poll, options = make_poll(owner=owner)
    services.votes.vote(voter.id, options[0].id)
    services.users.login(owner.email, "correct-horse")
    owner_id, poll_id, voter_id = owner.id, poll.id, voter.id

    services.users.delete_user(owner_id)

    assert not services.users.user_exists(owner_id)
    assert not services.polls.poll_exists(poll_id)
    assert services.sessions.get_user_sessions(owner_id) == []
    assert not services.votes.poll_vote_exists(voter_id, poll_id)


def test_user_polls_and_vote_polls(services, make_user, make_poll):
    owner = make_user()
    voter = make_user()
    poll, options = make_poll(owner=owner)
    services.votes.vote(voter.id, options[1].id)

    assert [p.id for p in services.users.get_user_polls(owner.id)] == [poll.id]
    assert [p.id for p in services.users.get_user_vote_polls(voter.id)] == [poll.id]
    assert services.users.get_user_vote_polls(owner.id) == []


def test_prune_unverified_users_spares_verified_and_pending(services, make_user, clock):
    stale_id = make_user().id
    verified = make_user(verified=True)
    pending = make_user()
    services.verifications.create(pending.email)

    clock.advance(seconds=services.config["VERIFY_TTL_SECONDS"] + 1)
    pruned = services.users.prune_unverified_users()

    # ``pending`` still has a token row until the ledger prunes it
    assert pruned == [stale_id]
    assert services.users.user_exists(verified.id)
    assert services.users.user_exists(pending.id)
