from league import db  # noqa: F401 - imported for model imports

from .pick import Ledger, LedgerRow, Pick, PickState, Slot
from .player_ledger import PlayerLedger
from .user import User

__all__ = [
    "User",
    "PlayerLedger",
    "Ledger",
    "LedgerRow",
    "Pick",
    "PickState",
    "Slot",
]
