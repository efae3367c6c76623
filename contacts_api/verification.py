"""
Email verification transitions.

A user is either pending (``verify`` is False and a verification token is
set) or verified (``verify`` is True and the token is cleared). Changing the
profile moves a verified user back to pending.
"""

import uuid

from contacts_api import models
from contacts_api.config import get_settings
from contacts_api.mail import Mailer

EMAIL_SUBJECT = "Verify your email"


def generate_verification_token() -> str:
    return str(uuid.uuid4())


def start_verification(user: models.User) -> str:
    user.verify = False
    user.verification_token = generate_verification_token()
    return user.verification_token


def require_reverification(user: models.User) -> str:
    """Any profile change invalidates the previous proof of email ownership."""
    return start_verification(user)


def confirm_email(user: models.User) -> None:
    user.verify = True
    user.verification_token = None


def verification_link(token: str) -> str:
    return f"{get_settings().public_base_url}/users/verify/{token}"


def send_verification_email(mailer: Mailer, email: str, token: str) -> bool:
    link = verification_link(token)
    html = f'<p>Click <a target="_blank" href="{link}">here</a> to verify your email.</p>'
    return mailer.send(email, EMAIL_SUBJECT, html)
