# core/security.py
# -*- coding: utf-8 -*-

import secrets

from .config import ADMIN_USERNAME, ADMIN_PASSWORD


def verify_credentials(username: str, password: str) -> bool:
    """Single static admin credential from config, nothing more."""
    user_ok = secrets.compare_digest(username.encode("utf-8"), ADMIN_USERNAME.encode("utf-8"))
    pass_ok = secrets.compare_digest(password.encode("utf-8"), ADMIN_PASSWORD.encode("utf-8"))
    return user_ok and pass_ok
