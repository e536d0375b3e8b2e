import pytest

from league.models import PickState
from league.services.ledger_sync import ledger_sync
from league.utils.errors import (
    AuthorizationError,
    CapacityError,
    UnknownParticipantError,
    ValidationError,
)

VLADO = "vlado@example.com"
ADMIN = "admin@example.com"
PICK = ("2026-01-10", "football", "Team A vs Team B", "Over 2.5", 1.80)


def test_submit_then_toggle_scores_the_win(service):
    service.submit_pick(VLADO, "Vlado", *PICK)

    result = service.toggle_status(VLADO, "Vlado", "2026-01-10", "a")

    assert result.row.slot_a.state is PickState.WON
    assert service.get_stats("Vlado")["total_score"] == 1.80
    ranking = service.get_ranking()
    assert ranking[0].participant == "Vlado"
    assert ranking[0].total_score == 1.80


def test_names_resolve_case_insensitively(service):
    result = service.submit_pick(VLADO, "vLaDo", *PICK)

    assert result.participant == "Vlado"
    with pytest.raises(UnknownParticipantError):
        service.get_ledger("Nobody")


def test_invalid_pick_leaves_ledger_unchanged(service):
    with pytest.raises(ValidationError) as exc:
        service.submit_pick(
            VLADO, "Vlado", "2026-01-10", "football", "Team A vs B", "1", 0.50
        )

    assert exc.value.message == "Odds must be at least 1.00"
    assert service.get_ledger("Vlado").rows == []
    assert ledger_sync.get_status()["stats"]["total_writes"] == 0


def test_authorization_is_checked_before_validation(service):
    with pytest.raises(AuthorizationError):
        service.submit_pick("fika@example.com", "Vlado", "bad", "", "", "", 0)

    with pytest.raises(AuthorizationError):
        service.toggle_status(None, "Vlado", "2026-01-10", "a")


def test_admin_may_edit_any_ledger(service):
    result = service.submit_pick(ADMIN, "Dzoni", *PICK)

    assert result.participant == "Dzoni"
    assert len(service.get_ledger("Dzoni").rows) == 1


def test_third_pick_for_a_day_is_rejected(service):
    service.submit_pick(VLADO, "Vlado", *PICK)
    service.submit_pick(VLADO, "Vlado", *PICK)
    before = service.get_ledger("Vlado").to_blob()

    with pytest.raises(CapacityError):
        service.submit_pick(VLADO, "Vlado", *PICK)

    assert service.get_ledger("Vlado").to_blob() == before


def test_noop_toggle_does_not_write(service):
    service.submit_pick(VLADO, "Vlado", *PICK)
    writes = ledger_sync.get_status()["stats"]["total_writes"]

    assert service.toggle_status(VLADO, "Vlado", "2026-01-10", "b") is None
    assert service.toggle_status(VLADO, "Vlado", "2026-02-01", "a") is None
    assert ledger_sync.get_status()["stats"]["total_writes"] == writes


@pytest.mark.parametrize("day, slot", [("01/10/2026", "a"), ("2026-01-10", "c")])
def test_toggle_rejects_bad_arguments(service, day, slot):
    with pytest.raises(ValidationError):
        service.toggle_status(VLADO, "Vlado", day, slot)


def test_get_ledger_returns_a_copy(service):
    service.submit_pick(VLADO, "Vlado", *PICK)

    ledger = service.get_ledger("Vlado")
    ledger.rows.clear()

    assert len(service.get_ledger("Vlado").rows) == 1


def test_mutation_result_serializes_row_and_sync(service):
    data = service.submit_pick(VLADO, "Vlado", *PICK).to_dict()

    assert data["participant"] == "Vlado"
    assert data["row"]["match1"]["status"] == "pending"
    assert data["sync"]["status"] == "saved"
