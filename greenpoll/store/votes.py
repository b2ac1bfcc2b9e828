from . import operation
from ..models import Poll, PollVote


@operation("poll_vote.create", write=True)
def create_vote(session, user_id, poll_id, poll_option_id, vote_time):
    vote = PollVote(user_id=user_id, poll_id=poll_id, poll_option_id=poll_option_id, vote_time=vote_time)
    session.add(vote)
    return [vote]


@operation("poll_vote.get")
def get_poll_vote(session, user_id, poll_id):
    return session.query(PollVote).filter_by(user_id=user_id, poll_id=poll_id).all()


@operation("poll_vote.get_by_id")
def get_poll_vote_by_id(session, poll_vote_id):
    return session.query(PollVote).filter_by(id=poll_vote_id).all()


@operation("poll_vote.get_poll")
def get_poll_vote_poll(session, poll_vote_id):
    return session.query(Poll).join(PollVote, PollVote.poll_id == Poll.id).filter(PollVote.id == poll_vote_id).all()


@operation("poll_vote.delete", write=True)
def unvote(session, user_id, poll_id):
    session.query(PollVote).filter_by(user_id=user_id, poll_id=poll_id).delete(synchronize_session="fetch")


@operation("poll_vote.delete_by_option", write=True)
def unvote_by_poll_option_id(session, user_id, poll_option_id):
    session.query(PollVote).filter_by(user_id=user_id, poll_option_id=poll_option_id).delete(
        synchronize_session="fetch"
    )
