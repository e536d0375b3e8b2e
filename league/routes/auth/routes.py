import logging

from flask import current_app, jsonify
from flask_login import login_required, login_user
from flask_wtf.csrf import generate_csrf

from league import db, limiter, login_manager
from league.forms.auth import LoginForm
from league.models import User
from league.routes.auth import bp
from league.services.session_gateway import (
    describe_identity,
    get_current_identity,
    sign_out,
)

logger = logging.getLogger(__name__)


def _roster():
    return current_app.extensions["ledger_service"].roster


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@bp.route("/csrf-token")
def csrf_token():
    """Token for clients that send JSON writes"""
    return jsonify({"csrf_token": generate_csrf()})


@bp.route("/login", methods=["POST"])
@limiter.limit("10 per minute")
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        return jsonify({"error": form.first_error() or "Invalid login"}), 400

    user = User.find_by_email(form.email.data)
    if user is None or not user.check_password(form.password.data):
        logger.warning(f"Failed login for {form.email.data}")
        return jsonify({"error": "Invalid email or password"}), 401

    if not user.is_active:
        return jsonify({"error": "Your account has been deactivated"}), 403

    login_user(user, remember=form.remember_me.data)
    user.update_last_login()
    logger.info(f"{user.email} logged in")

    return jsonify(describe_identity(user, _roster()))


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    sign_out()
    return jsonify({"success": True})


@bp.route("/me")
def me():
    return jsonify(describe_identity(get_current_identity(), _roster()))
