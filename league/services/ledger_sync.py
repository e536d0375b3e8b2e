"""
Background durable writes for ledgers using APScheduler.

Mutations update the in-memory ledger first and return to the caller. The
write to the ledger store is then queued as a one-off job on a single worker
thread. Each job stores the participant's latest in-memory ledger, so a job
that runs late can never persist an older snapshot. Failed writes are retried
with exponential backoff, logged, and recorded in the write status; the
in-memory state is never rolled back here.
"""

import atexit
import itertools
import logging
import threading
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler
from flask import has_app_context

from league.utils.errors import AuthorizationError, ConflictError, PersistenceError

logger = logging.getLogger(__name__)

PENDING = "pending"
SAVED = "saved"
FAILED = "failed"


@dataclass
class WriteStatus:
    state: str = SAVED
    error: str = None
    version: int = None
    updated_at: datetime = None
    pending_writes: int = 0

    def to_dict(self):
        return {
            "status": self.state,
            "error": self.error,
            "version": self.version,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "pending_writes": self.pending_writes,
        }


class LedgerSyncService:
    """Queues and performs full-ledger writes to the ledger store"""

    def __init__(self, app=None, store=None):
        self.scheduler = None
        self.app = app
        self.store = store
        self.is_running = False
        self._sequence = itertools.count(1)
        # Guards _status and sync_stats, shared by request threads and the worker
        self._lock = threading.Lock()
        self._reset_stats()

        if app:
            self.init_app(app, store)

    def init_app(self, app, store=None):
        """Initialize the dispatcher with a Flask app"""
        self.stop()
        self.app = app
        if store is not None:
            self.store = store

        self.max_retries = max(1, app.config.get("PERSISTENCE_MAX_RETRIES", 3))
        self.base_delay = app.config.get("PERSISTENCE_RETRY_DELAY", 1.0)
        self.backoff_factor = app.config.get("PERSISTENCE_BACKOFF_FACTOR", 2.0)
        self._reset_stats()

        # A single worker keeps writes for the same participant serialized
        self.scheduler = BackgroundScheduler(
            daemon=True,
            timezone="UTC",
            executors={"default": ThreadPoolExecutor(max_workers=1)},
        )

        atexit.unregister(self.shutdown)
        atexit.register(self.shutdown)

        if app.config.get("PERSISTENCE_ASYNC", True):
            self.start()

    def _reset_stats(self):
        with self._lock:
            self._status = {}
            self.sync_stats = {
                "total_writes": 0,
                "successful_writes": 0,
                "failed_writes": 0,
                "last_error": None,
                "last_write": None,
            }

    def start(self):
        """Start the background scheduler"""
        if self.is_running:
            return

        try:
            self.scheduler.start()
            self.is_running = True
            logger.info("Ledger write dispatcher started")
        except Exception as e:
            logger.error(f"Failed to start ledger write dispatcher: {e}")
            raise

    def stop(self):
        """Stop the background scheduler"""
        if not self.is_running:
            return

        try:
            self.scheduler.shutdown(wait=True)
            self.is_running = False
            logger.info("Ledger write dispatcher stopped")
        except Exception as e:
            logger.error(f"Error stopping ledger write dispatcher: {e}")

    def shutdown(self):
        """Graceful shutdown"""
        self.stop()

    def get_write_status(self, participant):
        with self._lock:
            status = self._status.get(participant)
            return replace(status) if status is not None else WriteStatus()

    def dispatch(self, participant, identity, load_snapshot, on_complete=None):
        """
        Queue a full-ledger write for participant.

        Args:
            participant: roster name
            identity: email of the identity that made the mutation
            load_snapshot: callable returning (Ledger, expected_version) at
                write time; expected_version None means unconditional
            on_complete: optional callable(participant, WriteStatus)

        Returns:
            a copy of the participant's WriteStatus: pending when the write
            was queued, its outcome when it ran inline
        """
        with self._lock:
            status = self._status.setdefault(participant, WriteStatus())
            status.state = PENDING
            status.error = None
            status.pending_writes += 1
            queued = replace(status)

        args = [participant, identity, load_snapshot, on_complete]

        if self.is_running:
            self.scheduler.add_job(
                func=self._write_job,
                args=args,
                id=f"ledger_write_{participant}_{next(self._sequence)}",
                name=f"Store ledger for {participant}",
                misfire_grace_time=None,
            )
            logger.debug(f"Queued ledger write for {participant}")
            return queued

        return self._write_job(*args)

    def _write_job(self, participant, identity, load_snapshot, on_complete):
        if has_app_context():
            return self._perform_write(participant, identity, load_snapshot, on_complete)
        with self.app.app_context():
            return self._perform_write(participant, identity, load_snapshot, on_complete)

    def _perform_write(self, participant, identity, load_snapshot, on_complete):
        error = None
        version = None
        try:
            version = self._write_with_retry(participant, identity, load_snapshot)
        except (AuthorizationError, PersistenceError) as e:
            error = e.message
            logger.error(f"Ledger for {participant} NOT saved: {e.message}")

        with self._lock:
            status = self._status.setdefault(participant, WriteStatus())
            status.pending_writes = max(0, status.pending_writes - 1)
            status.updated_at = datetime.now(timezone.utc)

            self.sync_stats["total_writes"] += 1
            self.sync_stats["last_write"] = status.updated_at

            if error is not None:
                status.state = FAILED
                status.error = error
                self.sync_stats["failed_writes"] += 1
                self.sync_stats["last_error"] = error
            else:
                # Later mutations still queued keep the status pending
                status.state = SAVED if status.pending_writes == 0 else PENDING
                status.error = None
                status.version = version
                self.sync_stats["successful_writes"] += 1

            outcome = replace(status)

        if on_complete is not None:
            try:
                on_complete(participant, outcome)
            except Exception as e:
                logger.error(f"Write callback failed for {participant}: {e}")

        return outcome

    def _write_with_retry(self, participant, identity, load_snapshot):
        """Store the latest snapshot, retrying transient failures with backoff"""
        for attempt in range(self.max_retries):
            ledger, expected_version = load_snapshot()
            try:
                return self.store.overwrite(
                    participant, ledger, identity, expected_version=expected_version
                )
            except (AuthorizationError, ConflictError):
                raise
            except PersistenceError as e:
                if attempt >= self.max_retries - 1:
                    raise
                delay = self.base_delay * (self.backoff_factor**attempt)
                logger.warning(
                    f"{e.message}. Waiting {delay}s before retry "
                    f"{attempt + 1}/{self.max_retries}"
                )
                time.sleep(delay)

        raise PersistenceError(f"Max retries ({self.max_retries}) exceeded")

    def get_status(self):
        """Get dispatcher status information"""
        with self._lock:
            stats = dict(self.sync_stats)
            participants = {
                name: status.to_dict() for name, status in self._status.items()
            }

        return {
            "is_running": self.is_running,
            "queued_jobs": len(self.scheduler.get_jobs()) if self.scheduler else 0,
            "stats": stats,
            "participants": participants,
        }


# Global dispatcher instance
ledger_sync = LedgerSyncService()
