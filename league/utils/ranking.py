"""
Standings for the league.

Participants are ordered by total score, highest first. The sort is stable,
so exact ties keep the roster order. The first three places get a badge, the
rest are "chasers" that still carry their absolute rank.
"""

from dataclasses import dataclass, field

from league.models.pick import Ledger
from league.utils.scoring import get_ledger_stats

PODIUM_BADGES = ("1st", "2nd", "3rd")


@dataclass
class RankingEntry:
    participant: str
    total_score: float
    won_count: int
    biggest_win: object = None
    recent_form: list = field(default_factory=list)
    lost_count: int = 0
    pending_count: int = 0
    current_streak: int = 0
    longest_win_streak: int = 0
    rank: int = 0
    theme: dict = field(default_factory=dict)

    @property
    def badge(self):
        if 1 <= self.rank <= len(PODIUM_BADGES):
            return PODIUM_BADGES[self.rank - 1]
        return None

    @property
    def is_podium(self):
        return self.badge is not None

    def to_dict(self):
        return {
            "participant": self.participant,
            "rank": self.rank,
            "badge": self.badge,
            "total_score": self.total_score,
            "won_count": self.won_count,
            "lost_count": self.lost_count,
            "pending_count": self.pending_count,
            "biggest_win": self.biggest_win.to_dict() if self.biggest_win else None,
            "recent_form": [pick.to_dict() for pick in self.recent_form],
            "current_streak": self.current_streak,
            "longest_win_streak": self.longest_win_streak,
            "theme": self.theme,
        }


def build_entry(participant, ledger, form_size=5, theme=None):
    stats = get_ledger_stats(ledger, form_size=form_size)
    return RankingEntry(
        participant=participant,
        total_score=stats["total_score"],
        won_count=stats["won_count"],
        biggest_win=stats["biggest_win"],
        recent_form=stats["recent_form"],
        lost_count=stats["lost_count"],
        pending_count=stats["pending_count"],
        current_streak=stats["current_streak"],
        longest_win_streak=stats["longest_win_streak"],
        theme=theme or {},
    )


def get_ranking(ledgers, roster, form_size=5):
    """
    Rank every roster participant by total score.

    Args:
        ledgers: mapping participant -> Ledger (missing participants rank
            with an empty ledger)
        roster: Roster giving the participant order used on ties
        form_size: number of recent picks kept per entry

    Returns:
        list of RankingEntry, best first, with rank set
    """
    entries = [
        build_entry(
            name,
            ledgers.get(name) or Ledger(name),
            form_size=form_size,
            theme=roster.theme(name),
        )
        for name in roster
    ]
    entries.sort(key=lambda entry: entry.total_score, reverse=True)

    for position, entry in enumerate(entries, start=1):
        entry.rank = position

    return entries


def split_podium(entries):
    """Split ranked entries into (podium, chasers)"""
    podium = [entry for entry in entries if entry.is_podium]
    chasers = [entry for entry in entries if not entry.is_podium]
    return podium, chasers
