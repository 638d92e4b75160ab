from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import AccountStatus, Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User profiles.

    Note (DIP): services depend on this interface, not on Firestore directly.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_many(self, user_ids: Sequence[str]) -> Sequence[User]:
        raise NotImplementedError

    def create_profile(self, user: User) -> str:
        raise NotImplementedError

    def update_fields(self, user_id: str, fields: dict) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: str) -> bool:
        raise NotImplementedError

    def list_children(self, parent_id: str) -> Sequence[User]:
        """Students whose `parentId` points at this parent, by name."""

        raise NotImplementedError

    def list_users(
        self,
        *,
        role: Optional[Role] = None,
        status: Optional[AccountStatus] = None,
    ) -> Sequence[User]:
        raise NotImplementedError


class IdentityProvider(Protocol):
    """Hosted authentication service."""

    def verify_id_token(self, id_token: str) -> dict:
        """Return decoded claims (at least `uid` and `email`)."""

        raise NotImplementedError

    def create_account(self, *, email: str, password: str, display_name: str) -> str:
        """Create an auth account and return its uid."""

        raise NotImplementedError

    def delete_account(self, uid: str) -> None:
        raise NotImplementedError
