from flask import Blueprint

bp = Blueprint("auth", __name__)

from league.routes.auth import routes  # noqa: F401, E402
