"""
Write authorization for ledgers.

An identity may edit the ledger of the participant whose name matches the
local part of its email (case-insensitive). The configured administrator
email may edit every ledger.
"""

from flask import current_app


def _identity_email(identity):
    if identity is None:
        return ""
    if getattr(identity, "is_anonymous", False):
        return ""
    email = identity if isinstance(identity, str) else getattr(identity, "email", "")
    return (email or "").strip().lower()


def is_admin(identity, admin_email=None):
    if admin_email is None:
        admin_email = current_app.config.get("LEAGUE_ADMIN_EMAIL", "")
    email = _identity_email(identity)
    return bool(email) and bool(admin_email) and email == admin_email.strip().lower()


def can_write(identity, participant, admin_email=None):
    """Return True if identity may mutate participant's ledger"""
    email = _identity_email(identity)
    if not email or not participant:
        return False

    if is_admin(email, admin_email):
        return True

    local_part = email.split("@", 1)[0]
    return local_part == str(participant).strip().lower()


def writable_participants(identity, roster, admin_email=None):
    return [name for name in roster if can_write(identity, name, admin_email)]
