import logging
import time
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum

from league.utils.errors import CapacityError

logger = logging.getLogger(__name__)


class PickState(str, Enum):
    """Settlement state of a pick, stored with the legacy status values"""

    EMPTY = "empty"
    PENDING = "pending"
    WON = "win"
    LOST = "loss"

    def next(self):
        """Forward rotation of the settlement cycle (EMPTY stays EMPTY)"""
        return _SETTLEMENT_CYCLE.get(self, self)


_SETTLEMENT_CYCLE = {
    PickState.PENDING: PickState.WON,
    PickState.WON: PickState.LOST,
    PickState.LOST: PickState.PENDING,
}


class Slot(str, Enum):
    A = "a"
    B = "b"

    @property
    def blob_key(self):
        return "match1" if self is Slot.A else "match2"

    @classmethod
    def parse(cls, value):
        """Accept 'a'/'b' as well as the stored 'match1'/'match2' keys"""
        if isinstance(value, Slot):
            return value
        text = str(value or "").strip().lower()
        if text in ("a", "match1", "1"):
            return cls.A
        if text in ("b", "match2", "2"):
            return cls.B
        raise ValueError(f"Unknown slot: {value!r}")


@dataclass(frozen=True)
class Pick:
    category: str = ""
    description: str = ""
    selection: str = ""
    price_factor: float = 0.0
    state: PickState = PickState.EMPTY

    @classmethod
    def empty(cls):
        return cls()

    @property
    def is_empty(self):
        return self.state is PickState.EMPTY

    def to_dict(self):
        """Serialize using the stored blob field names"""
        return {
            "sport": self.category,
            "name": self.description,
            "tip": self.selection,
            "odds": self.price_factor,
            "status": self.state.value,
        }

    @classmethod
    def from_dict(cls, data):
        if not data:
            return cls.empty()
        try:
            state = PickState(data.get("status", PickState.EMPTY.value))
        except ValueError:
            state = PickState.EMPTY
        return cls(
            category=data.get("sport") or "",
            description=data.get("name") or "",
            selection=data.get("tip") or "",
            price_factor=float(data.get("odds") or 0.0),
            state=state,
        )


@dataclass
class LedgerRow:
    id: int
    date: date
    slot_a: Pick = field(default_factory=Pick.empty)
    slot_b: Pick = field(default_factory=Pick.empty)

    def get(self, slot):
        return self.slot_a if Slot.parse(slot) is Slot.A else self.slot_b

    def set(self, slot, pick):
        if Slot.parse(slot) is Slot.A:
            self.slot_a = pick
        else:
            self.slot_b = pick

    @property
    def picks(self):
        return [self.slot_a, self.slot_b]

    @property
    def is_full(self):
        return not self.slot_a.is_empty and not self.slot_b.is_empty

    def to_dict(self):
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "match1": self.slot_a.to_dict(),
            "match2": self.slot_b.to_dict(),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=int(data.get("id") or 0),
            date=date.fromisoformat(str(data["date"])[:10]),
            slot_a=Pick.from_dict(data.get("match1")),
            slot_b=Pick.from_dict(data.get("match2")),
        )


class Ledger:
    """Ordered daily rows of picks for one participant, unique by date"""

    MAX_PICKS_PER_DAY = 2

    def __init__(self, participant, rows=None, version=0):
        self.participant = participant
        self.rows = sorted(rows or [], key=lambda row: row.date)
        self.version = version

    def __repr__(self):
        return f"<Ledger {self.participant} rows={len(self.rows)} v{self.version}>"

    def find_row(self, day):
        for row in self.rows:
            if row.date == day:
                return row
        return None

    def iter_picks(self):
        """Picks in ledger order, slot A before slot B"""
        for row in self.rows:
            yield row.slot_a
            yield row.slot_b

    def _next_row_id(self):
        now = int(time.time() * 1000)
        latest = max((row.id for row in self.rows), default=0)
        return max(now, latest + 1)

    def submit_pick(self, candidate):
        """Place a validated candidate into the row for its date.

        Creates the row when the date is new, otherwise fills the first
        empty slot. Raises CapacityError without touching the ledger when
        both slots are taken. Returns the affected row.
        """
        pick = Pick(
            category=candidate.category,
            description=candidate.description,
            selection=candidate.selection,
            price_factor=candidate.price_factor,
            state=PickState.PENDING,
        )

        row = self.find_row(candidate.date)
        if row is None:
            row = LedgerRow(id=self._next_row_id(), date=candidate.date, slot_a=pick)
            self.rows.append(row)
            self.rows.sort(key=lambda r: r.date)
            return row

        if row.slot_a.is_empty:
            row.slot_a = pick
        elif row.slot_b.is_empty:
            row.slot_b = pick
        else:
            raise CapacityError(
                f"Maximum {self.MAX_PICKS_PER_DAY} picks per day allowed "
                f"({candidate.date.isoformat()} is full)"
            )
        return row

    def toggle_status(self, day, slot):
        """Advance a slot through the settlement cycle.

        Returns the updated row, or None when there is no row for the day
        or the slot was never filled.
        """
        row = self.find_row(day)
        if row is None:
            return None

        pick = row.get(slot)
        if pick.is_empty:
            return None

        row.set(slot, replace(pick, state=pick.state.next()))
        return row

    def to_blob(self):
        return [row.to_dict() for row in self.rows]

    @classmethod
    def from_blob(cls, participant, blob, version=0):
        """Load a stored blob, merging rows that share a date.

        Picks from a repeated date fill the empty slots of the first row for
        that date; picks that no longer fit are dropped and logged.
        """
        rows = {}
        for item in blob or []:
            row = LedgerRow.from_dict(item)
            first = rows.get(row.date)
            if first is None:
                rows[row.date] = row
                continue

            for pick in row.picks:
                if pick.is_empty:
                    continue
                if first.slot_a.is_empty:
                    first.slot_a = pick
                elif first.slot_b.is_empty:
                    first.slot_b = pick
                else:
                    logger.warning(
                        f"Dropped pick '{pick.description}' for {participant} on "
                        f"{row.date.isoformat()}: date already has two picks"
                    )
        return cls(participant, list(rows.values()), version=version)

    def copy(self):
        return Ledger.from_blob(self.participant, self.to_blob(), self.version)

    def to_dict(self):
        return {
            "participant": self.participant,
            "version": self.version,
            "rows": self.to_blob(),
        }
