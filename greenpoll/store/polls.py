from sqlalchemy import func

from . import operation
from ..models import Poll, PollOption, PollVote, User


@operation("poll.create", write=True)
def create_poll(session, user_id, title, description):
    poll = Poll(user_id=user_id, title=title, description=description)
    session.add(poll)
    return [poll]


@operation("poll.get")
def get_poll(session, poll_id):
    return session.query(Poll).filter_by(id=poll_id).all()


@operation("poll.get_options")
def get_poll_options(session, poll_id):
    return session.query(PollOption).filter_by(poll_id=poll_id).order_by(PollOption.id).all()


@operation("poll.get_votes")
def get_poll_votes(session, poll_id):
    return session.query(PollVote).filter_by(poll_id=poll_id).order_by(PollVote.vote_time, PollVote.id).all()


@operation("poll.get_voters")
def get_poll_voters(session, poll_id):
    return (
        session.query(
            PollVote.user_id,
            User.username,
            PollVote.poll_option_id,
            PollOption.value.label("poll_option_value"),
            PollVote.vote_time,
        )
        .join(User, User.id == PollVote.user_id)
        .join(PollOption, PollOption.id == PollVote.poll_option_id)
        .filter(PollVote.poll_id == poll_id)
        .order_by(PollVote.vote_time, PollVote.id)
        .all()
    )


@operation("poll.set_title", write=True)
def set_title(session, poll_id, title):
    session.query(Poll).filter_by(id=poll_id).update({"title": title}, synchronize_session="fetch")


@operation("poll.set_description", write=True)
def set_description(session, poll_id, description):
    session.query(Poll).filter_by(id=poll_id).update({"description": description}, synchronize_session="fetch")


@operation("poll.delete", write=True)
def delete_poll(session, poll_id):
    session.query(Poll).filter_by(id=poll_id).delete(synchronize_session="fetch")


@operation("poll_option.create", write=True)
def create_poll_option(session, poll_id, value, slot):
    option = PollOption(poll_id=poll_id, value=value, slot=slot)
    session.add(option)
    return [option]


@operation("poll_option.get")
def get_poll_option(session, poll_option_id):
    return session.query(PollOption).filter_by(id=poll_option_id).all()


@operation("poll_option.get_poll")
def get_poll_option_poll(session, poll_option_id):
    return session.query(Poll).join(PollOption, PollOption.poll_id == Poll.id).filter(
        PollOption.id == poll_option_id
    ).all()


@operation("poll_option.count")
def count_poll_options(session, poll_id):
    return [session.query(func.count(PollOption.id)).filter_by(poll_id=poll_id).scalar()]


@operation("poll_option.used_slots")
def used_slots(session, poll_id):
    return [row.slot for row in session.query(PollOption.slot).filter_by(poll_id=poll_id)]


@operation("poll_option.set_value", write=True)
def set_poll_option_value(session, poll_option_id, value):
    session.query(PollOption).filter_by(id=poll_option_id).update({"value": value}, synchronize_session="fetch")


@operation("poll_option.delete", write=True)
def delete_poll_option(session, poll_option_id):
    session.query(PollOption).filter_by(id=poll_option_id).delete(synchronize_session="fetch")
