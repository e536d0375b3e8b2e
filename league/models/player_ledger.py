from datetime import datetime, timezone

from league import db


class PlayerLedger(db.Model):
    """One participant's full ledger, stored as an opaque JSON blob"""

    __tablename__ = "player_bets"

    player_name = db.Column(db.String(80), primary_key=True)
    bets = db.Column(db.JSON, nullable=False, default=list)
    version = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    updated_by = db.Column(db.String(120))

    def __repr__(self):
        return f"<PlayerLedger {self.player_name} v{self.version}>"
