"""Nickname/email login against the local user directory.

There is no credential check. The email, compared case-insensitively, is the
only key that lets a returning user recover their projects; logging in
without one always creates a new identity.
"""

from __future__ import annotations

import logging
import uuid
from urllib.parse import quote

from app.core.entities import User
from app.core.exceptions import InputValidationError
from app.services.local_store import LocalStore

logger = logging.getLogger(__name__)

DEFAULT_AVATAR_TEMPLATE = "https://api.dicebear.com/7.x/micah/svg?seed={seed}"


def avatar_for(name: str, template: str = DEFAULT_AVATAR_TEMPLATE) -> str:
    return template.format(seed=quote(name))


def login(
    store: LocalStore,
    name: str,
    email: str = "",
    avatar_template: str = DEFAULT_AVATAR_TEMPLATE,
) -> User:
    if not name or not name.strip():
        raise InputValidationError("login name is required", detail="يرجى إدخال الاسم المستعار.")

    email = (email or "").strip()
    users = store.load_user_directory()

    target: User | None = None
    if email:
        wanted = email.lower()
        target = next((u for u in users if u.email.lower() == wanted), None)

    if target is not None:
        target = target.model_copy(update={"name": name})
        users = [target if u.id == target.id else u for u in users]
        store.save_user_directory(users)
        logger.info("identity.returning_user", extra={"user_id": target.id})
    else:
        target = User(
            id=email.lower() if email else str(uuid.uuid4()),
            name=name,
            email=email,
            avatar=avatar_for(name, avatar_template),
        )
        users.append(target)
        store.save_user_directory(users)
        logger.info("identity.new_user", extra={"user_id": target.id, "has_email": bool(email)})

    store.save_session(target)
    return target


def logout(store: LocalStore) -> None:
    store.clear_session()
