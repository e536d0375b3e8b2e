from datetime import date

from league.models import Ledger, LedgerRow, Pick, PickState
from league.utils.ranking import get_ranking, split_podium
from league.utils.roster import Roster

ROSTER = Roster(["Vlado", "Fika", "Labud", "Ilija", "Dzoni"])


def ledger_with_wins(name, *odds):
    rows = [
        LedgerRow(
            id=i,
            date=date(2026, 1, i),
            slot_a=Pick("football", "Match", "1", value, PickState.WON),
        )
        for i, value in enumerate(odds, start=1)
    ]
    return Ledger(name, rows)


def test_ranking_orders_by_score_and_assigns_badges():
    ledgers = {
        "Vlado": ledger_with_wins("Vlado", 1.5),
        "Fika": ledger_with_wins("Fika", 3.0, 2.0),
        "Labud": ledger_with_wins("Labud", 2.5),
        "Ilija": Ledger("Ilija"),
        "Dzoni": ledger_with_wins("Dzoni", 1.1),
    }

    ranking = get_ranking(ledgers, ROSTER)

    assert [entry.participant for entry in ranking] == [
        "Fika",
        "Labud",
        "Vlado",
        "Dzoni",
        "Ilija",
    ]
    assert [entry.rank for entry in ranking] == [1, 2, 3, 4, 5]
    assert [entry.badge for entry in ranking] == ["1st", "2nd", "3rd", None, None]
    assert ranking[0].total_score == 5.0


def test_exact_ties_keep_roster_order():
    ledgers = {
        "Vlado": ledger_with_wins("Vlado", 2.0),
        "Fika": ledger_with_wins("Fika", 2.0),
    }

    ranking = get_ranking(ledgers, ROSTER)

    assert ranking[0].participant == "Vlado"
    assert ranking[1].participant == "Fika"
    # participants without ledgers rank at zero, in roster order
    assert [entry.participant for entry in ranking[2:]] == ["Labud", "Ilija", "Dzoni"]


def test_split_podium_keeps_absolute_ranks_for_chasers():
    ranking = get_ranking({"Dzoni": ledger_with_wins("Dzoni", 4.0)}, ROSTER)

    podium, chasers = split_podium(ranking)

    assert [entry.participant for entry in podium] == ["Dzoni", "Vlado", "Fika"]
    assert [entry.rank for entry in chasers] == [4, 5]
    assert all(entry.badge is None for entry in chasers)


def test_entry_serializes_biggest_win_and_form():
    ranking = get_ranking({"Vlado": ledger_with_wins("Vlado", 1.5, 2.5)}, ROSTER)
    data = ranking[0].to_dict()

    assert data["participant"] == "Vlado"
    assert data["badge"] == "1st"
    assert data["biggest_win"]["odds"] == 2.5
    assert [pick["odds"] for pick in data["recent_form"]] == [2.5, 1.5]


def test_form_size_limits_recent_form():
    ledger = ledger_with_wins("Vlado", 1.1, 1.2, 1.3, 1.4)

    ranking = get_ranking({"Vlado": ledger}, ROSTER, form_size=2)

    assert [pick.price_factor for pick in ranking[0].recent_form] == [1.4, 1.3]
