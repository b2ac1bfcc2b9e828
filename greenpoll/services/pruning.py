"""
Background pruning of expired tokens.

Two mechanisms run side by side:

* a full sweep at start-up and then every ``interval`` seconds, which on its
  own bounds how long an expired row can survive;
* a one-shot timer per token, armed when the token is created (or found live
  at start-up), so rows vanish at their expiry instant rather than at the
  next sweep.

Ledger reads already hide expired tokens, so the timers and sweeps only
reclaim storage; they never decide whether a token is valid.
"""
import logging
import threading
from contextlib import nullcontext
from typing import Callable, Dict, Optional, Tuple

from flask import current_app, has_app_context

from ..errors import ServiceError
from ..utils import clock

logger = logging.getLogger(__name__)


class PruningScheduler:
    def __init__(
        self,
        services,
        app=None,
        interval: Optional[float] = 60,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        self.services = services
        self.app = app
        self.interval = interval
        self.timer_factory = timer_factory

        self._lock = threading.Lock()
        self._timers: Dict[Tuple[str, str], threading.Timer] = {}
        self._sweeper: Optional[threading.Timer] = None
        self._running = False

    @property
    def ledgers(self):
        return (self.services.verifications, self.services.password_resets)

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._timers)

    def start(self) -> None:
        """Sweep what expired while we were down, then arm every live token."""
        self._running = True
        self._arm_sweeper()
        with self._context():
            self.sweep()
            for ledger in self.ledgers:
                for token in ledger.get_all():
                    self.schedule(ledger, token)

    def stop(self) -> None:
        self._running = False
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
            sweeper, self._sweeper = self._sweeper, None
        for timer in timers:
            timer.cancel()
        if sweeper is not None:
            sweeper.cancel()

    def sweep(self) -> None:
        for ledger in self.ledgers:
            ledger.prune()
        self.services.users.prune_unverified_users()

    def schedule(self, ledger, token) -> threading.Timer:
        delay = max(0.0, (ledger.expires_at(token) - clock.utcnow()).total_seconds())
        key = (ledger.family, token.id)

        timer = self.timer_factory(delay, self._expire, args=(ledger, token.id))
        timer.daemon = True
        with self._lock:
            previous = self._timers.pop(key, None)
            self._timers[key] = timer
        if previous is not None:
            previous.cancel()

        timer.start()
        logger.debug("Armed %s expiry in %.1fs", ledger.family, delay)
        return timer

    def _expire(self, ledger, token_id: str) -> None:
        with self._lock:
            self._timers.pop((ledger.family, token_id), None)
        try:
            with self._context():
                ledger.expire(token_id)
        except ServiceError:
            logger.exception("Failed to expire %s record", ledger.family)
        except Exception:
            # Nothing above a timer thread would log this
            logger.exception("Unexpected error expiring %s record", ledger.family)

    def _arm_sweeper(self) -> None:
        if not self.interval or not self._running:
            return
        sweeper = self.timer_factory(self.interval, self._periodic_sweep)
        sweeper.daemon = True
        with self._lock:
            self._sweeper = sweeper
        sweeper.start()

    def _periodic_sweep(self) -> None:
        try:
            with self._context():
                self.sweep()
        except ServiceError:
            logger.exception("Periodic prune sweep failed")
        except Exception:
            logger.exception("Unexpected error in periodic prune sweep")
        finally:
            self._arm_sweeper()

    def _context(self):
        # Timer threads need their own app context (and so their own session)
        if self.app is None or (has_app_context() and current_app._get_current_object() is self.app):
            return nullcontext()
        return self.app.app_context()
