import logging
from smtplib import SMTPException

from flask import current_app, render_template
from flask_mail import Message

from ..extensions import mail

logger = logging.getLogger(__name__)


class MailNotifier:
    """
    Out-of-band delivery. Fire-and-forget: a failed send is logged and
    reported as ``False``; callers do not retry.
    """

    def send(self, address: str, subject: str, template: str, context: dict) -> bool:
        sender = current_app.config.get("MAIL_DEFAULT_SENDER")
        if not sender:
            logger.error("MAIL_DEFAULT_SENDER is not configured; dropping %r email", template)
            return False

        body = render_template(f"email/{template}.txt", **context)
        msg = Message(subject=subject, recipients=[address], body=body, sender=sender)
        try:
            mail.send(msg)
        except (SMTPException, OSError):
            logger.exception("Failed to send %r email", template)
            return False
        return True
