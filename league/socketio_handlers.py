"""
SocketIO Event Handlers for Ledger Updates

Browser sessions connect to the /ledgers namespace and are told whenever a
participant's ledger has been written, so they can refresh their copy.
"""

import logging

from flask import request
from flask_login import current_user

from league import socketio

logger = logging.getLogger(__name__)

NAMESPACE = "/ledgers"

# Track connected clients
connected_clients = {}


@socketio.on("connect", namespace=NAMESPACE)
def on_connect():
    """Handle client connection to ledgers namespace"""
    try:
        user_id = current_user.id if current_user.is_authenticated else None
        connected_clients[request.sid] = {"user_id": user_id}
        logger.info(f"Client connected to {NAMESPACE}: {request.sid} (user: {user_id})")
    except Exception as e:
        logger.error(f"Error in ledgers connect: {e}")


@socketio.on("disconnect", namespace=NAMESPACE)
def on_disconnect():
    """Handle client disconnection from ledgers namespace"""
    client = connected_clients.pop(request.sid, None)
    if client is not None:
        logger.info(
            f"Client disconnected from {NAMESPACE}: {request.sid} "
            f"(user: {client['user_id']})"
        )


def broadcast_ledger_update(participant, status):
    """Tell every connected session that a ledger write finished"""
    try:
        socketio.emit(
            "ledger_updated",
            {"participant": participant, **status.to_dict()},
            namespace=NAMESPACE,
        )
        logger.debug(f"Broadcasted ledger update for {participant}")
    except Exception as e:
        logger.error(f"Error broadcasting ledger update: {e}")
