import logging


def _token_timers(timers, family):
    return [t for t in timers() if t.args and t.args[0].family == family]


def test_create_arms_timer_at_expiry(services, make_user, timers):
    user = make_user()
    token = services.verifications.create(user.email)

    armed = _token_timers(timers, "verification")
    assert len(armed) == 1
    assert armed[0].interval == services.config["VERIFY_TTL_SECONDS"]
    assert armed[0].args[1] == token.id
    assert armed[0].daemon is True


def test_idempotent_create_rearms_single_timer(services, make_user, timers, clock):
    user = make_user()
    services.password_resets.create(user.email)
    clock.advance(minutes=20)
    services.password_resets.create(user.email)
    # The re-request re-arms for the time left on the original token

    armed = _token_timers(timers, "password_reset")
    assert len(armed) == 1
    assert armed[0].interval == services.config["PASSWORD_RESET_TTL_SECONDS"] - 20 * 60
    assert services.scheduler.pending == 1


def test_password_reset_timer_deletes_token(services, make_user, timers, clock):
    user = make_user()
    user_id = user.id
    token_id = services.password_resets.create(user.email).id

    clock.advance(seconds=services.config["PASSWORD_RESET_TTL_SECONDS"])
    _token_timers(timers, "password_reset")[0].fire()

    assert services.password_resets.prune() == []
    assert services.users.user_exists(user_id)
    assert services.scheduler.pending == 0
    assert not services.password_resets.exists(token_id)


def test_verification_timer_deletes_unverified_user(services, make_user, timers, clock):
    user = make_user()
    user_id = user.id
    services.verifications.create(user.email)

    clock.advance(seconds=services.config["VERIFY_TTL_SECONDS"])
    _token_timers(timers, "verification")[0].fire()

    assert not services.users.user_exists(user_id)


def test_verification_timer_spares_verified_user(services, make_user, timers, clock):
    user = make_user()
    services.verifications.create(user.email)
    # Verified some other way while the token stayed around
    services.users.set_verified(user.id)

    clock.advance(seconds=services.config["VERIFY_TTL_SECONDS"])
    _token_timers(timers, "verification")[0].fire()

    assert services.users.user_exists(user.id)
    assert services.verifications.get_all() == []


def test_timer_after_redeem_is_harmless(services, make_user, timers, clock):
    user = make_user()
    token = services.verifications.create(user.email)
    services.verifications.redeem(token.id)

    clock.advance(seconds=services.config["VERIFY_TTL_SECONDS"])
    _token_timers(timers, "verification")[0].fire()

    assert services.users.get_user(user.id).verified is True


def test_sweep_reclaims_expired_rows(services, make_user, clock):
    pending = make_user()
    pending_id = pending.id
    services.verifications.create(pending.email)
    reset_owner = make_user(verified=True)
    services.password_resets.create(reset_owner.email)

    clock.advance(seconds=max(
        services.config["VERIFY_TTL_SECONDS"], services.config["PASSWORD_RESET_TTL_SECONDS"]
    ) + 1)
    services.scheduler.sweep()

    assert services.verifications.prune() == []
    assert services.password_resets.prune() == []
    assert not services.users.user_exists(pending_id)
    assert services.users.user_exists(reset_owner.id)


def test_start_sweeps_and_rearms_live_tokens(services, make_user, clock, timers):
    stale = make_user()
    stale_id = stale.id
    services.verifications.create(stale.email)
    clock.advance(minutes=45)
    live = make_user()
    live_token = services.verifications.create(live.email)
    clock.advance(minutes=20)

    services.scheduler.stop()
    services.scheduler.start()

    assert not services.users.user_exists(stale_id)
    armed = _token_timers(timers, "verification")
    assert [t.args[1] for t in armed] == [live_token.id]
    assert armed[0].interval == 40 * 60

    sweepers = [t for t in timers() if not t.args]
    assert [t.interval for t in sweepers] == [services.config["PRUNE_INTERVAL_SECONDS"]]


def test_periodic_sweep_rearms_itself(services, timers):
    services.scheduler.start()
    sweeper = [t for t in timers() if not t.args][0]

    sweeper.fire()

    sweepers = [t for t in timers() if not t.args]
    assert len(sweepers) == 2


def test_stop_cancels_everything(services, make_user, timers):
    services.scheduler.start()
    services.verifications.create(make_user().email)

    services.scheduler.stop()

    assert timers() == []
    assert services.scheduler.pending == 0


def test_unexpected_timer_error_is_logged(services, make_user, timers, monkeypatch, caplog):
    user = make_user()
    services.password_resets.create(user.email)

    def broken_expire(token_id):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(services.password_resets, "expire", broken_expire)

    with caplog.at_level(logging.ERROR, logger="greenpoll"):
        _token_timers(timers, "password_reset")[0].fire()

    assert "Unexpected error expiring password_reset record" in caplog.text
    assert services.scheduler.pending == 0


def test_unexpected_sweep_error_is_logged_and_sweeper_rearmed(services, timers, monkeypatch, caplog):
    services.scheduler.start()
    sweeper = [t for t in timers() if not t.args][0]

    def broken_sweep():
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(services.scheduler, "sweep", broken_sweep)

    with caplog.at_level(logging.ERROR, logger="greenpoll"):
        sweeper.fire()

    assert "Unexpected error in periodic prune sweep" in caplog.text
    assert len([t for t in timers() if not t.args]) == 2
