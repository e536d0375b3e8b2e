"""
Ledger service: the mutation-facing surface of the league.

Holds every participant's ledger in memory ahead of the ledger store. A
mutation is applied to the in-memory ledger and returned to the caller
straight away; the full ledger is then written through the background
dispatcher, whose outcome is exposed as a write status.
"""

import logging
import threading
from dataclasses import dataclass

from league.models import LedgerRow, Slot
from league.services.ledger_store import LedgerStore
from league.services.ledger_sync import FAILED, ledger_sync
from league.utils.cache_utils import invalidate_ranking_cache
from league.utils.errors import AuthorizationError, ValidationError
from league.utils.permissions import can_write
from league.utils.ranking import get_ranking
from league.utils.roster import Roster
from league.utils.scoring import get_ledger_stats
from league.utils.validation import ensure_valid_pick, parse_day

logger = logging.getLogger(__name__)


@dataclass
class MutationResult:
    participant: str
    row: LedgerRow
    write: object

    def to_dict(self):
        return {
            "participant": self.participant,
            "row": self.row.to_dict(),
            "sync": self.write.to_dict(),
        }


def _identity_label(identity):
    return getattr(identity, "email", identity)


class LedgerService:
    def __init__(self, app=None):
        self.app = None
        self.roster = Roster([])
        self.store = None
        self.sync = None
        self.ledgers = {}
        self._loaded = False
        self._lock = threading.RLock()

        if app:
            self.init_app(app)

    def init_app(self, app, store=None, sync=None):
        self.app = app
        self.roster = Roster.from_config(app.config)
        self.store = store or LedgerStore()
        self.sync = sync or ledger_sync
        self.sync.init_app(app, self.store)
        self.form_size = app.config.get("RECENT_FORM_SIZE", 5)
        self.version_check = app.config.get("LEDGER_VERSION_CHECK", False)

        with self._lock:
            self.ledgers = {}
            self._loaded = False

        app.extensions["ledger_service"] = self

    # Reads

    def refresh(self):
        """Reload every ledger from the store, replacing in-memory state"""
        ledgers = self.store.read_all(self.roster)
        with self._lock:
            self.ledgers = ledgers
            self._loaded = True
        invalidate_ranking_cache()
        logger.info(f"Loaded {len(ledgers)} ledgers from store")
        return self.get_all_ledgers()

    def _ensure_loaded(self):
        if not self._loaded:
            self.refresh()

    def get_ledger(self, participant):
        name = self.roster.resolve(participant)
        self._ensure_loaded()
        with self._lock:
            return self.ledgers[name].copy()

    def get_all_ledgers(self):
        self._ensure_loaded()
        with self._lock:
            return {name: ledger.copy() for name, ledger in self.ledgers.items()}

    def get_stats(self, participant):
        return get_ledger_stats(self.get_ledger(participant), form_size=self.form_size)

    def get_ranking(self):
        return get_ranking(self.get_all_ledgers(), self.roster, form_size=self.form_size)

    def get_write_status(self, participant):
        return self.sync.get_write_status(self.roster.resolve(participant))

    # Mutations

    def _authorize(self, identity, participant):
        if not can_write(identity, participant):
            logger.warning(
                f"Rejected ledger edit of {participant} by {_identity_label(identity)}"
            )
            raise AuthorizationError(f"Not allowed to edit {participant}'s ledger")

    def submit_pick(
        self, identity, participant, date, category, description, selection, price_factor
    ):
        """
        Add a pick to a participant's ledger.

        Raises:
            UnknownParticipantError, AuthorizationError, ValidationError,
            CapacityError - in all cases the ledger is left unchanged
        """
        name = self.roster.resolve(participant)
        self._authorize(identity, name)
        candidate = ensure_valid_pick(date, category, description, selection, price_factor)

        self._ensure_loaded()
        with self._lock:
            row = self.ledgers[name].submit_pick(candidate)
            row = LedgerRow.from_dict(row.to_dict())

        logger.info(
            f"{_identity_label(identity)} added pick for {name} on {candidate.date} "
            f"({candidate.description} @ {candidate.price_factor:.2f})"
        )
        return MutationResult(name, row, self._persist(name, identity))

    def toggle_status(self, identity, participant, date, slot):
        """
        Advance one slot through the settlement cycle.

        Returns:
            MutationResult, or None when nothing changed (no row for that
            date or an empty slot)
        """
        name = self.roster.resolve(participant)
        self._authorize(identity, name)

        day = parse_day(date)
        if day is None:
            raise ValidationError("Invalid date format")
        try:
            slot = Slot.parse(slot)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        self._ensure_loaded()
        with self._lock:
            row = self.ledgers[name].toggle_status(day, slot)
            if row is None:
                return None
            row = LedgerRow.from_dict(row.to_dict())

        logger.info(
            f"{_identity_label(identity)} set {name} {day} slot {slot.value} "
            f"to {row.get(slot).state.value}"
        )
        return MutationResult(name, row, self._persist(name, identity))

    def _snapshot_loader(self, name):
        def load():
            with self._lock:
                ledger = self.ledgers[name].copy()
            expected = ledger.version if self.version_check else None
            return ledger, expected

        return load

    def _persist(self, name, identity):
        invalidate_ranking_cache()
        return self.sync.dispatch(
            name,
            _identity_label(identity),
            self._snapshot_loader(name),
            on_complete=self._on_write_complete,
        )

    def _on_write_complete(self, participant, status):
        from league.socketio_handlers import broadcast_ledger_update

        if status.state != FAILED and status.version is not None:
            with self._lock:
                self.ledgers[participant].version = status.version
        broadcast_ledger_update(participant, status)


# Global service instance
ledger_service = LedgerService()
