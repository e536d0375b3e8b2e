import pytest

from league import db
from league.models import Ledger, PlayerLedger
from league.services.ledger_store import LedgerStore
from league.services.ledger_sync import FAILED, SAVED, ledger_sync
from league.utils.errors import AuthorizationError, PersistenceError
from league.utils.validation import ensure_valid_pick

VLADO = "vlado@example.com"
ADMIN = "admin@example.com"


class FailingStore(LedgerStore):
    """Store whose writes always fail, as if the database were down"""

    def __init__(self):
        self.calls = 0

    def overwrite(self, participant, ledger, identity, expected_version=None):
        self.calls += 1
        raise PersistenceError("database unavailable")


def add_pick(service, description="Team A vs Team B", day="2026-01-10"):
    return service.submit_pick(
        VLADO, "Vlado", day, "football", description, "Over 2.5", 1.80
    )


def test_read_all_fills_missing_participants(ctx):
    ledgers = LedgerStore().read_all(["Vlado", "Fika"])

    assert set(ledgers) == {"Vlado", "Fika"}
    assert ledgers["Vlado"].rows == []
    assert ledgers["Vlado"].version == 0


def test_overwrite_replaces_blob_and_bumps_version(ctx):
    store = LedgerStore()
    ledger = Ledger("Vlado")
    ledger.submit_pick(ensure_valid_pick("2026-01-10", "tennis", "A vs B", "A", 2))

    assert store.overwrite("Vlado", ledger, VLADO) == 1
    assert store.overwrite("Vlado", ledger, VLADO) == 2

    row = db.session.get(PlayerLedger, "Vlado")
    assert row.updated_by == VLADO
    assert row.bets == ledger.to_blob()
    assert store.read("Vlado").to_blob() == ledger.to_blob()


def test_overwrite_checks_write_permission(ctx):
    with pytest.raises(AuthorizationError):
        LedgerStore().overwrite("Vlado", Ledger("Vlado"), "fika@example.com")

    assert db.session.get(PlayerLedger, "Vlado") is None


def test_successful_write_is_saved_and_durable(service):
    result = add_pick(service)

    assert result.write.state == SAVED
    assert result.write.version == 1
    assert service.get_ledger("Vlado").version == 1

    service.refresh()
    assert len(service.get_ledger("Vlado").rows) == 1


def test_failed_write_keeps_memory_and_reports_failure(service, ctx):
    store = FailingStore()
    service.init_app(ctx, store=store)

    result = add_pick(service)

    assert result.write.state == FAILED
    assert result.write.error == "database unavailable"
    assert store.calls == ctx.config["PERSISTENCE_MAX_RETRIES"]
    assert len(service.get_ledger("Vlado").rows) == 1
    assert service.get_write_status("vlado").state == FAILED
    assert ledger_sync.get_status()["stats"]["failed_writes"] == 1


def test_refresh_discards_unsaved_changes(service, ctx):
    service.init_app(ctx, store=FailingStore())
    add_pick(service)

    service.store = LedgerStore()
    service.refresh()

    assert service.get_ledger("Vlado").rows == []


def test_last_write_wins_without_version_check(service):
    add_pick(service)
    LedgerStore().overwrite("Vlado", Ledger("Vlado"), ADMIN)

    result = add_pick(service, description="Second match")

    assert result.write.state == SAVED
    stored = LedgerStore().read("Vlado")
    assert len(stored.rows) == 1
    assert stored.rows[0].is_full


def test_version_check_reports_conflict_until_refresh(service, ctx):
    ctx.config["LEDGER_VERSION_CHECK"] = True
    service.init_app(ctx)

    add_pick(service)
    LedgerStore().overwrite("Vlado", Ledger("Vlado"), ADMIN)

    result = add_pick(service, description="Second match")
    assert result.write.state == FAILED
    assert "changed on the server" in result.write.error
    assert LedgerStore().read("Vlado").rows == []

    service.refresh()
    result = add_pick(service, description="Third match")
    assert result.write.state == SAVED
    assert result.write.version == 3


def test_queued_write_stores_latest_snapshot(service):
    calls = []

    def load_snapshot():
        ledger = service.get_ledger("Vlado")
        calls.append(len(ledger.rows))
        return ledger, None

    add_pick(service)
    add_pick(service, day="2026-01-11")
    status = ledger_sync.dispatch("Vlado", VLADO, load_snapshot)

    assert calls == [2]
    assert status.state == SAVED
    assert len(LedgerStore().read("Vlado").rows) == 2
