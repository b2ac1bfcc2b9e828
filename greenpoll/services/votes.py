import logging

from .base import BaseService
from ..errors import NotFound
from ..models import Poll, PollVote
from ..utils import clock

logger = logging.getLogger(__name__)


class VoteService(BaseService):
    def vote(self, user_id: int, poll_option_id: int) -> PollVote:
        """
        Cast or replace the user's vote on the option's poll.

        Remove and insert share one unit of work, and ``UNIQUE(user_id,
        poll_id)`` rejects a concurrent second insert, so at most one vote per
        user and poll survives. The losing caller sees a StoreError.
        """
        poll = self.services.poll_options.get_poll_option_poll(poll_option_id)

        with self.store.atomic():
            self.store.execute("poll_vote.delete", user_id=user_id, poll_id=poll.id)
            vote = self.store.execute(
                "poll_vote.create",
                user_id=user_id,
                poll_id=poll.id,
                poll_option_id=poll_option_id,
                vote_time=clock.utcnow(),
            )[0]

        logger.info("Vote recorded poll_id=%s user_id=%s", poll.id, user_id)
        return vote

    def unvote(self, user_id: int, poll_id: int) -> None:
        self.store.execute("poll_vote.delete", user_id=user_id, poll_id=poll_id)

    def unvote_by_poll_option_id(self, user_id: int, poll_option_id: int) -> None:
        self.store.execute("poll_vote.delete_by_option", user_id=user_id, poll_option_id=poll_option_id)

    def poll_vote_exists(self, user_id: int, poll_id: int) -> bool:
        return bool(self.store.execute("poll_vote.get", user_id=user_id, poll_id=poll_id))

    def get_poll_vote(self, user_id: int, poll_id: int) -> PollVote:
        vote = self._first("poll_vote.get", user_id=user_id, poll_id=poll_id)
        if vote is None:
            raise NotFound("Poll vote does not exist")
        return vote

    def get_poll_vote_by_id(self, poll_vote_id: int) -> PollVote:
        vote = self._first("poll_vote.get_by_id", poll_vote_id=poll_vote_id)
        if vote is None:
            raise NotFound("Poll vote does not exist")
        return vote

    def get_poll_vote_poll(self, poll_vote_id: int) -> Poll:
        poll = self._first("poll_vote.get_poll", poll_vote_id=poll_vote_id)
        if poll is None:
            raise NotFound("Poll vote does not exist")
        return poll
