# Eventlet monkey patching MUST be first before any other imports
import eventlet

eventlet.monkey_patch()

from league import create_app, db, socketio  # noqa: E402
from league.models import PlayerLedger, User  # noqa: E402
from league.services.ledger_service import ledger_service  # noqa: E402

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "User": User,
        "PlayerLedger": PlayerLedger,
        "ledger_service": ledger_service,
    }


if __name__ == "__main__":
    socketio.run(app, host="0.0.0.0", port=5000, debug=True)
