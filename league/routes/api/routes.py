from functools import wraps

from flask import jsonify, make_response, request
from flask_login import login_required

from league.routes.api import bp
from league.services.ledger_service import ledger_service
from league.services.session_gateway import get_current_identity
from league.utils.cache_utils import RANKING_CACHE_PREFIX, cached_route
from league.utils.errors import LeagueError
from league.utils.ranking import split_podium


def add_security_headers(f):
    """Add no-store headers to API responses carrying ledger state"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        response = make_response(f(*args, **kwargs))
        response.headers["Cache-Control"] = (
            "no-store, no-cache, must-revalidate, max-age=0"
        )
        return response

    return decorated_function


def _payload():
    """Request body as a dict, from JSON or a submitted form"""
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


@bp.route("/roster")
def roster():
    """Participants in roster order with display metadata"""
    return jsonify({"participants": ledger_service.roster.to_dict()})


@bp.route("/ledgers")
@add_security_headers
def ledgers():
    """Every participant's ledger; ?refresh=1 reloads from the store first"""
    try:
        if request.args.get("refresh", type=int):
            all_ledgers = ledger_service.refresh()
        else:
            all_ledgers = ledger_service.get_all_ledgers()
    except LeagueError as e:
        return jsonify(e.to_dict()), e.status_code

    return jsonify({name: ledger.to_dict() for name, ledger in all_ledgers.items()})


@bp.route("/ledgers/<participant>")
@add_security_headers
def ledger(participant):
    try:
        return jsonify(ledger_service.get_ledger(participant).to_dict())
    except LeagueError as e:
        return jsonify(e.to_dict()), e.status_code


@bp.route("/ledgers/<participant>/picks", methods=["POST"])
@login_required
def submit_pick(participant):
    """Add a pick for a date; the date's row takes at most two picks"""
    data = _payload()

    try:
        result = ledger_service.submit_pick(
            get_current_identity(),
            participant,
            data.get("date"),
            data.get("category"),
            data.get("description"),
            data.get("selection"),
            data.get("price_factor"),
        )
    except LeagueError as e:
        return jsonify(e.to_dict()), e.status_code

    return jsonify(result.to_dict()), 201


@bp.route("/ledgers/<participant>/toggle", methods=["POST"])
@login_required
def toggle_status(participant):
    """Advance a pick through pending -> won -> lost -> pending"""
    data = _payload()

    try:
        result = ledger_service.toggle_status(
            get_current_identity(),
            participant,
            data.get("date"),
            data.get("slot"),
        )
    except LeagueError as e:
        return jsonify(e.to_dict()), e.status_code

    if result is None:
        return jsonify({"changed": False})

    return jsonify({"changed": True, **result.to_dict()})


@bp.route("/ledgers/<participant>/stats")
def ledger_stats(participant):
    try:
        stats = ledger_service.get_stats(participant)
    except LeagueError as e:
        return jsonify(e.to_dict()), e.status_code

    biggest_win = stats["biggest_win"]
    return jsonify(
        {
            **stats,
            "participant": ledger_service.roster.resolve(participant),
            "biggest_win": biggest_win.to_dict() if biggest_win else None,
            "recent_form": [pick.to_dict() for pick in stats["recent_form"]],
        }
    )


@bp.route("/ledgers/<participant>/sync")
@add_security_headers
def sync_status(participant):
    """Outcome of the latest durable write for a ledger"""
    try:
        status = ledger_service.get_write_status(participant)
    except LeagueError as e:
        return jsonify(e.to_dict()), e.status_code

    return jsonify(status.to_dict())


@bp.route("/ranking")
@cached_route(timeout=300, key_prefix=RANKING_CACHE_PREFIX)
def ranking():
    """Standings, best first; exact ties keep roster order"""
    try:
        entries = ledger_service.get_ranking()
    except LeagueError as e:
        return e.to_dict(), e.status_code

    podium, chasers = split_podium(entries)
    return {
        "ranking": [entry.to_dict() for entry in entries],
        "podium": [entry.participant for entry in podium],
        "chasers": [entry.participant for entry in chasers],
    }
