from datetime import datetime, timezone

from pickem import db
from pickem.schemas import PickRecord


class Pick(db.Model):
    __tablename__ = "picks"

    id = db.Column(db.Integer, primary_key=True)

    # Pick identification
    user_email = db.Column(db.String(120), nullable=False)
    game_id = db.Column(db.Integer, db.ForeignKey("games.id"), nullable=False)

    # Pick details
    selected_team = db.Column(db.String(100), nullable=False)
    is_lock = db.Column(db.Boolean, nullable=False, default=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Constraints and indexes
    __table_args__ = (
        db.UniqueConstraint("user_email", "game_id", name="unique_user_game_pick"),
        db.Index("idx_pick_user", "user_email"),
        db.Index("idx_pick_game", "game_id"),
    )

    def __repr__(self):
        return f"<Pick user={self.user_email} game_id={self.game_id} team={self.selected_team}{' LOCK' if self.is_lock else ''}>"

    @property
    def week(self):
        """Get the week number from the associated game"""
        return self.game.week if self.game else None

    def to_record(self):
        return PickRecord(
            user_id=self.user_email,
            game_id=self.game_id,
            selected_team=self.selected_team,
            is_lock=bool(self.is_lock),
        )

    @staticmethod
    def get_user_picks_for_week(user_email, week, for_update=False):
        """Get a user's picks for a week ordered by kickoff"""
        from .game import Game

        query = (
            Pick.query.join(Game)
            .filter(Pick.user_email == user_email, Game.week == week)
            .order_by(Game.kickoff_time, Pick.id)
        )
        if for_update:
            # Serializes concurrent submissions where the database supports it
            query = query.with_for_update(of=Pick)
        return query.all()

    @staticmethod
    def get_all_in_submission_order():
        """All picks, oldest first, so later rows win on duplicates"""
        return Pick.query.order_by(Pick.created_at, Pick.id).all()

    def to_dict(self, outcome=None, record=None):
        """Convert pick to dictionary for API responses

        ``record`` overrides the stored pick when scoring, e.g. a lock scored
        as a plain pick.
        """
        data = {
            "id": self.id,
            "userEmail": self.user_email,
            "gameId": self.game_id,
            "week": self.week,
            "selectedTeam": self.selected_team,
            "isLock": bool(self.is_lock),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "game": self.game.to_dict() if self.game else None,
        }

        if outcome is not None:
            from pickem.utils.scoring import calculate_pick_score

            record = record or self.to_record()
            data["outcome"] = outcome.side.value
            data["isCorrect"] = (
                outcome.covers(record.selected_team) if outcome.resolved else None
            )
            data["points"] = calculate_pick_score(record, outcome)

        return data
