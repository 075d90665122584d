from bingo import db
from bingo.services.game import PlayerState, Scorecard
from datetime import timezone
import json
import uuid


class PlayerRecord(db.Model):
    """Durable directory entry for a player and the scorecard they picked.

    The live session is in memory; this table lets a returning player be
    restored into it after a restart. Round history is never stored here.
    """
    __tablename__ = 'player_record'
    player_id = db.Column(db.String(36), primary_key=True)
    display_name = db.Column(db.String(255), nullable=True)
    joined_at = db.Column(db.DateTime(timezone=True), nullable=True)
    scorecard_id = db.Column(db.String(64), nullable=True)
    scorecard_payload = db.Column(db.Text, nullable=True)  # JSON-encoded list of rows

    @property
    def scorecard(self):
        if not self.scorecard_id or not self.scorecard_payload:
            return None
        try:
            rows = json.loads(self.scorecard_payload)
        except ValueError:
            return None
        return Scorecard.from_dict({'id': self.scorecard_id, 'rows': rows})

    @property
    def player_uuid(self):
        return uuid.UUID(self.player_id)

    def joined_at_utc(self):
        # SQLite drops tzinfo on the way back
        if self.joined_at is not None and self.joined_at.tzinfo is None:
            return self.joined_at.replace(tzinfo=timezone.utc)
        return self.joined_at

    def update_from(self, player: PlayerState) -> None:
        self.display_name = player.display_name
        if self.joined_at is None:
            self.joined_at = player.joined_at
        if player.scorecard is not None:
            self.scorecard_id = player.scorecard.id
            self.scorecard_payload = json.dumps([list(row) for row in player.scorecard.rows])
        else:
            self.scorecard_id = None
            self.scorecard_payload = None

    def to_dict(self, joined=False):
        return {
            'player_id': self.player_id,
            'display_name': self.display_name,
            'joined': joined,
            'has_scorecard': self.scorecard_id is not None,
        }


def save_player(player: PlayerState) -> PlayerRecord:
    record = db.session.get(PlayerRecord, str(player.id))
    if record is None:
        record = PlayerRecord(player_id=str(player.id))
    record.update_from(player)
    db.session.add(record)
    db.session.commit()
    return record


def clear_all_scorecards() -> int:
    cleared = PlayerRecord.query.filter(PlayerRecord.scorecard_id.isnot(None)).update(
        {PlayerRecord.scorecard_id: None, PlayerRecord.scorecard_payload: None},
        synchronize_session=False,
    )
    db.session.commit()
    return cleared
