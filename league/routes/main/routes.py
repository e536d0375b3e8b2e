from flask import current_app, jsonify

from league import db
from league.routes.main import bp
from league.services.ledger_sync import ledger_sync


@bp.route("/")
def index():
    """Entry point listing the available resources"""
    return jsonify(
        {
            "name": "Betting League",
            "participants": current_app.config.get("LEAGUE_ROSTER", []),
            "endpoints": {
                "ranking": "/api/ranking",
                "ledgers": "/api/ledgers",
                "login": "/auth/login",
            },
        }
    )


@bp.route("/health")
def health():
    """Health check for load balancers"""
    try:
        db.session.execute(db.text("SELECT 1"))
        database = "ok"
    except Exception as e:
        current_app.logger.error(f"Health check database error: {e}")
        database = "error"

    status = "healthy" if database == "ok" else "degraded"
    return (
        jsonify(
            {
                "status": status,
                "database": database,
                "ledger_writes": ledger_sync.get_status()["stats"],
            }
        ),
        200 if status == "healthy" else 503,
    )
