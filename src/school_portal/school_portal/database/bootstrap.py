from __future__ import annotations

import logging
import os
from typing import Optional

from ..core.enums import Role
from ..users.repository import UserRepository
from ..users.service import UserService

logger = logging.getLogger(__name__)


def ensure_admin_user(
    users: UserRepository,
    user_service: UserService,
    *,
    email: Optional[str] = None,
    password: Optional[str] = None,
    display_name: str = "Administrator",
) -> Optional[str]:
    """Create the first admin account unless one with that email exists.

    Credentials default to ADMIN_EMAIL / ADMIN_PASSWORD from the environment.
    Returns the new uid, or None when nothing was created.
    """

    email = email or os.getenv("ADMIN_EMAIL")
    password = password or os.getenv("ADMIN_PASSWORD")
    if not email or not password:
        logger.warning("ADMIN_EMAIL/ADMIN_PASSWORD not set, skipping admin seed")
        return None

    existing = users.get_by_email(email.strip().lower())
    if existing:
        if existing.role != Role.ADMIN:
            logger.warning("%s exists but is not an admin, leaving it unchanged", email)
        return None

    uid = user_service.create_account(
        actor=None,
        current_role=Role.ADMIN,
        email=email,
        password=password,
        display_name=os.getenv("ADMIN_NAME", display_name),
        role=Role.ADMIN,
    )
    logger.info("Seeded admin account %s", email)
    return uid
