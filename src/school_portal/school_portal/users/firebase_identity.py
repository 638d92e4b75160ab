from __future__ import annotations

import logging

from firebase_admin import auth

from ..core.exceptions import AuthenticationError, ValidationError
from ..database.connection import FirebaseConnection
from .repository import IdentityProvider

logger = logging.getLogger(__name__)


class FirebaseIdentityProvider(IdentityProvider):
    """Firebase Authentication behind the IdentityProvider interface."""

    def __init__(self, conn: FirebaseConnection):
        self._conn = conn

    def verify_id_token(self, id_token: str) -> dict:
        try:
            return auth.verify_id_token(id_token, app=self._conn.app())
        except (auth.InvalidIdTokenError, auth.ExpiredIdTokenError, auth.RevokedIdTokenError) as e:
            raise AuthenticationError("Session expired, please sign in again") from e
        except ValueError as e:
            raise AuthenticationError("Invalid sign-in token") from e

    def create_account(self, *, email: str, password: str, display_name: str) -> str:
        try:
            record = auth.create_user(
                email=email,
                password=password,
                display_name=display_name,
                app=self._conn.app(),
            )
        except auth.EmailAlreadyExistsError as e:
            raise ValidationError("A user with this email already exists") from e
        logger.info("Created auth account %s for %s", record.uid, email)
        return record.uid

    def delete_account(self, uid: str) -> None:
        try:
            auth.delete_user(uid, app=self._conn.app())
        except auth.UserNotFoundError:
            logger.warning("Auth account %s already gone", uid)
