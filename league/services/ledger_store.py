"""
Ledger store: keyed persistence of every participant's full ledger.

Each participant owns one row in ``player_bets`` holding the whole ledger as
a JSON blob. Writes always replace the entire blob.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from league import db
from league.models import Ledger, PlayerLedger
from league.utils.errors import AuthorizationError, ConflictError, PersistenceError
from league.utils.permissions import can_write

logger = logging.getLogger(__name__)


class LedgerStore:
    def read_all(self, roster):
        """Read every roster participant's ledger (missing rows are empty)"""
        try:
            stored = {row.player_name: row for row in PlayerLedger.query.all()}
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to read ledgers: {e}")
            raise PersistenceError("Could not load ledgers") from e

        ledgers = {}
        for name in roster:
            row = stored.get(name)
            if row is None:
                ledgers[name] = Ledger(name)
            else:
                ledgers[name] = Ledger.from_blob(name, row.bets, version=row.version)
        return ledgers

    def read(self, participant):
        try:
            row = db.session.get(PlayerLedger, participant)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to read ledger for {participant}: {e}")
            raise PersistenceError(f"Could not load ledger for {participant}") from e

        if row is None:
            return Ledger(participant)
        return Ledger.from_blob(participant, row.bets, version=row.version)

    def overwrite(self, participant, ledger, identity, expected_version=None):
        """
        Replace a participant's stored ledger.

        Args:
            participant: roster name
            ledger: Ledger to store
            identity: user (or email) performing the write
            expected_version: when given, the write only succeeds if the
                stored version still matches

        Returns:
            the new stored version
        """
        if not can_write(identity, participant):
            raise AuthorizationError(f"Not allowed to edit {participant}'s ledger")

        try:
            row = db.session.get(PlayerLedger, participant)
            current_version = row.version if row is not None else 0

            if expected_version is not None and current_version != expected_version:
                raise ConflictError(
                    f"Ledger for {participant} changed on the server "
                    f"(expected v{expected_version}, found v{current_version})"
                )

            if row is None:
                row = PlayerLedger(player_name=participant)
                db.session.add(row)

            row.bets = ledger.to_blob()
            row.version = current_version + 1
            row.updated_by = getattr(identity, "email", identity)
            db.session.commit()

            logger.info(f"Stored ledger for {participant} (v{row.version})")
            return row.version

        except ConflictError:
            db.session.rollback()
            raise
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to store ledger for {participant}: {e}")
            raise PersistenceError(f"Could not save ledger for {participant}") from e
