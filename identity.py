import logging
from functools import lru_cache

from firebase_admin import auth

from config import ACTION_URL
from database import get_firebase_app

logger = logging.getLogger(__name__)


class UserNotFound(Exception):
    pass


class EmailAlreadyExists(Exception):
    pass


class IdentityProvider:
    """Firebase Authentication, used only for identity and email verification.

    Credentials never reach this service: accounts are created without a
    password and the bcrypt hash lives in the user's store record.
    """

    def __init__(self, app=None):
        self.app = app

    def create_user(self, email: str) -> str:
        try:
            user = auth.create_user(email=email, email_verified=False, app=self.app)
        except auth.EmailAlreadyExistsError:
            raise EmailAlreadyExists(email)
        return user.uid

    def lookup(self, email: str):
        """Return (uid, email_verified) for an email address"""
        try:
            user = auth.get_user_by_email(email, app=self.app)
        except auth.UserNotFoundError:
            raise UserNotFound(email)
        return user.uid, user.email_verified

    def delete_user(self, uid: str):
        try:
            auth.delete_user(uid, app=self.app)
        except auth.UserNotFoundError:
            raise UserNotFound(uid)

    def email_verification_link(self, email: str) -> str:
        settings = auth.ActionCodeSettings(url=ACTION_URL, handle_code_in_app=True)
        try:
            return auth.generate_email_verification_link(email, action_code_settings=settings, app=self.app)
        except auth.UserNotFoundError:
            raise UserNotFound(email)


@lru_cache()
def get_identity() -> IdentityProvider:
    return IdentityProvider(get_firebase_app())
