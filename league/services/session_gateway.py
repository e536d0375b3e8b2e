"""
Session gateway on top of Flask-Login.

Exposes the logged-in identity, lets callers subscribe to identity changes
(login, logout, remember-cookie reload) and signs the current user out.
"""

import logging

from flask import current_app
from flask_login import (
    current_user,
    logout_user,
    user_loaded_from_cookie,
    user_logged_in,
    user_logged_out,
)

from league.utils.permissions import is_admin, writable_participants

logger = logging.getLogger(__name__)


def get_current_identity():
    """Return the authenticated user, or None for anonymous sessions"""
    if current_user and current_user.is_authenticated:
        return current_user._get_current_object()
    return None


def on_identity_change(callback):
    """
    Subscribe to identity changes.

    Args:
        callback: called as callback(identity) with the new user, or None
            after a logout

    Returns:
        a callable that removes the subscription
    """

    def _logged_in(sender, user=None, **extra):
        callback(user)

    def _logged_out(sender, user=None, **extra):
        callback(None)

    user_logged_in.connect(_logged_in, weak=False)
    user_loaded_from_cookie.connect(_logged_in, weak=False)
    user_logged_out.connect(_logged_out, weak=False)

    def unsubscribe():
        user_logged_in.disconnect(_logged_in)
        user_loaded_from_cookie.disconnect(_logged_in)
        user_logged_out.disconnect(_logged_out)

    return unsubscribe


def sign_out():
    identity = get_current_identity()
    logout_user()
    if identity is not None:
        logger.info(f"Signed out {identity.email}")


def describe_identity(identity, roster):
    """Identity summary with the ledgers it may edit"""
    if identity is None:
        return {"authenticated": False, "user": None, "can_edit": []}

    return {
        "authenticated": True,
        "user": identity.to_dict(),
        "is_admin": is_admin(identity, current_app.config.get("LEAGUE_ADMIN_EMAIL")),
        "can_edit": writable_participants(identity, roster),
    }
