import logging
from typing import List

from .base import BaseService, check_length, conflict_as
from ..errors import NotFound, ValidationError
from ..models import Poll, PollOption, PollVote

logger = logging.getLogger(__name__)


class PollService(BaseService):
    """
    Polls and their read projections. Ownership is not checked here; the
    API layer compares ``poll.user_id`` with the current user first.
    """

    def create_poll(self, user_id: int, title: str, description: str = "") -> Poll:
        _check_title(title)
        _check_description(description)

        poll = self.store.execute("poll.create", user_id=user_id, title=title, description=description)[0]
        logger.info("Poll created poll_id=%s user_id=%s", poll.id, user_id)
        return poll

    def poll_exists(self, poll_id: int) -> bool:
        return bool(self.store.execute("poll.get", poll_id=poll_id))

    def get_poll(self, poll_id: int) -> Poll:
        poll = self._first("poll.get", poll_id=poll_id)
        if poll is None:
            raise NotFound("Poll does not exist")
        return poll

    def get_poll_options(self, poll_id: int) -> List[PollOption]:
        return self.store.execute("poll.get_options", poll_id=poll_id)

    def get_poll_votes(self, poll_id: int) -> List[PollVote]:
        return self.store.execute("poll.get_votes", poll_id=poll_id)

    def get_poll_voters(self, poll_id: int) -> list:
        """Rows of (user_id, username, poll_option_id, poll_option_value, vote_time)."""
        return self.store.execute("poll.get_voters", poll_id=poll_id)

    def set_title(self, poll_id: int, title: str) -> None:
        _check_title(title)
        self.store.execute("poll.set_title", poll_id=poll_id, title=title)

    def set_description(self, poll_id: int, description: str) -> None:
        _check_description(description)
        self.store.execute("poll.set_description", poll_id=poll_id, description=description)

    def delete_poll(self, poll_id: int) -> None:
        self.store.execute("poll.delete", poll_id=poll_id)
        logger.info("Poll deleted poll_id=%s", poll_id)


class PollOptionService(BaseService):
    def create_poll_option(self, poll_id: int, value: str) -> PollOption:
        """
        Add an option in the lowest free slot of the poll.

        The slot columns carry the cap: two creators racing for the last slot
        collide on ``UNIQUE(poll_id, slot)`` and the loser gets the same error
        as a caller who counted five options up front.
        """
        self.services.polls.get_poll(poll_id)
        cap_reached = ValidationError("Maximum number of poll options has been reached")

        with self.store.atomic():
            used = set(self.store.execute("poll_option.used_slots", poll_id=poll_id))
            if len(used) >= PollOption.MAX_PER_POLL:
                raise cap_reached
            _check_value(value)

            slot = min(set(range(PollOption.MAX_PER_POLL)) - used)
            with conflict_as(cap_reached):
                option = self.store.execute("poll_option.create", poll_id=poll_id, value=value, slot=slot)[0]

        return option

    def poll_option_exists(self, poll_option_id: int) -> bool:
        return bool(self.store.execute("poll_option.get", poll_option_id=poll_option_id))

    def get_poll_option(self, poll_option_id: int) -> PollOption:
        option = self._first("poll_option.get", poll_option_id=poll_option_id)
        if option is None:
            raise NotFound("Poll option does not exist")
        return option

    def get_poll_option_poll(self, poll_option_id: int) -> Poll:
        poll = self._first("poll_option.get_poll", poll_option_id=poll_option_id)
        if poll is None:
            raise NotFound("Poll option does not exist")
        return poll

    def set_poll_option_value(self, poll_option_id: int, value: str) -> None:
        _check_value(value)
        self.store.execute("poll_option.set_value", poll_option_id=poll_option_id, value=value)

    def get_num_poll_options(self, poll_id: int) -> int:
        return self.store.execute("poll_option.count", poll_id=poll_id)[0]

    def delete_poll_option(self, poll_option_id: int) -> None:
        self.store.execute("poll_option.delete", poll_option_id=poll_option_id)


def _check_title(title: str) -> None:
    check_length("Title", title, Poll.TITLE_MIN, Poll.TITLE_MAX, field="title")


def _check_description(description: str) -> None:
    check_length("Description", description, 0, Poll.DESCRIPTION_MAX, field="description")


def _check_value(value: str) -> None:
    check_length("Option text", value, PollOption.VALUE_MIN, PollOption.VALUE_MAX, field="value")
