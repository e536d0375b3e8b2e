"""
Scoring for the betting league.

A won pick is worth its odds; everything else is worth nothing. Totals are
summed exactly and rounded once, so the result does not depend on row order.
"""

from decimal import ROUND_HALF_UP, Decimal

from league.models.pick import PickState

TWO_PLACES = Decimal("0.01")


def calculate_pick_score(pick):
    """
    Calculate score for a single pick.

    Returns:
        the pick's odds for a won pick
        0.0 for lost, pending or empty slots
    """
    if pick.state is PickState.WON:
        return pick.price_factor
    return 0.0


def round_score(values):
    """Sum floats exactly and round half away from zero to 2 places"""
    total = sum((Decimal(str(value)) for value in values), Decimal("0"))
    return float(total.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def calculate_total_score(ledger):
    return round_score(
        pick.price_factor for pick in ledger.iter_picks() if pick.state is PickState.WON
    )


def _calculate_streaks(picks):
    """Return (current_streak, longest_win_streak) over settled picks.

    current_streak is positive for wins, negative for losses.
    """
    current = 0
    longest_win = 0
    for pick in picks:
        if pick.state is PickState.WON:
            current = current + 1 if current > 0 else 1
            longest_win = max(longest_win, current)
        elif pick.state is PickState.LOST:
            current = current - 1 if current < 0 else -1
    return current, longest_win


def get_ledger_stats(ledger, form_size=5):
    """Aggregate statistics for one participant's ledger"""
    picks = [pick for pick in ledger.iter_picks() if not pick.is_empty]

    won = [pick for pick in picks if pick.state is PickState.WON]

    biggest_win = None
    for pick in won:
        if biggest_win is None or pick.price_factor > biggest_win.price_factor:
            biggest_win = pick

    recent_form = list(reversed(picks[-form_size:])) if form_size > 0 else []
    current_streak, longest_win_streak = _calculate_streaks(picks)

    return {
        "total_score": round_score(pick.price_factor for pick in won),
        "won_count": len(won),
        "lost_count": sum(1 for pick in picks if pick.state is PickState.LOST),
        "pending_count": sum(1 for pick in picks if pick.state is PickState.PENDING),
        "total_picks": len(picks),
        "biggest_win": biggest_win,
        "recent_form": recent_form,
        "current_streak": current_streak,
        "longest_win_streak": longest_win_streak,
    }
