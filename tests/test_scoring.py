from datetime import date

from league.models import Ledger, LedgerRow, Pick, PickState
from league.utils.scoring import (
    calculate_pick_score,
    calculate_total_score,
    get_ledger_stats,
)


def pick(odds, state=PickState.WON, description="Match"):
    return Pick("football", description, "1", odds, state)


def row(day, a=None, b=None):
    return LedgerRow(
        id=day,
        date=date(2026, 1, day),
        slot_a=a or Pick.empty(),
        slot_b=b or Pick.empty(),
    )


def test_only_won_picks_score():
    assert calculate_pick_score(pick(2.5)) == 2.5
    assert calculate_pick_score(pick(2.5, PickState.LOST)) == 0.0
    assert calculate_pick_score(pick(2.5, PickState.PENDING)) == 0.0
    assert calculate_pick_score(Pick.empty()) == 0.0


def test_empty_ledger_stats():
    stats = get_ledger_stats(Ledger("Vlado"))

    assert stats["total_score"] == 0.0
    assert stats["won_count"] == 0
    assert stats["biggest_win"] is None
    assert stats["recent_form"] == []
    assert stats["current_streak"] == 0


def test_final_sum_is_rounded_not_each_term():
    ledger = Ledger("Vlado", [row(1, pick(1.005), pick(1.005))])

    assert calculate_total_score(ledger) == 2.01
    assert get_ledger_stats(ledger)["total_score"] == 2.01


def test_total_is_idempotent_and_order_independent():
    rows = [
        row(1, pick(1.1), pick(2.2)),
        row(2, pick(3.3, PickState.LOST), pick(1.7)),
        row(3, pick(0.1 + 0.2)),
    ]
    ledger = Ledger("Vlado", rows)
    total = calculate_total_score(ledger)

    assert calculate_total_score(ledger) == total

    shuffled = Ledger("Vlado", [])
    shuffled.rows = list(reversed(rows))
    assert calculate_total_score(shuffled) == total == 5.3


def test_biggest_win_prefers_first_on_ties():
    first = pick(3.0, description="First")
    ledger = Ledger(
        "Vlado",
        [
            row(1, pick(1.5), first),
            row(2, pick(3.0, description="Second"), pick(9.0, PickState.LOST)),
        ],
    )

    assert get_ledger_stats(ledger)["biggest_win"] is first


def test_recent_form_is_last_five_most_recent_first():
    picks = [pick(1.0 + i / 10, description=f"P{i}") for i in range(7)]
    ledger = Ledger(
        "Vlado",
        [
            row(1, picks[0], picks[1]),
            row(2, picks[2], picks[3]),
            row(3, picks[4]),
            row(4, picks[5], picks[6]),
        ],
    )

    form = get_ledger_stats(ledger)["recent_form"]

    assert [p.description for p in form] == ["P6", "P5", "P4", "P3", "P2"]


def test_counts_and_streaks():
    ledger = Ledger(
        "Vlado",
        [
            row(1, pick(1.5), pick(1.5)),
            row(2, pick(1.5), pick(2.0, PickState.LOST)),
            row(3, pick(2.0, PickState.PENDING), pick(2.0, PickState.LOST)),
        ],
    )

    stats = get_ledger_stats(ledger)

    assert stats["won_count"] == 3
    assert stats["lost_count"] == 2
    assert stats["pending_count"] == 1
    assert stats["total_picks"] == 6
    assert stats["longest_win_streak"] == 3
    assert stats["current_streak"] == -2
