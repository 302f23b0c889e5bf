from datetime import datetime, timezone

from pickem import db
from pickem.schemas import GameRecord


class Game(db.Model):
    __tablename__ = "games"

    id = db.Column(db.Integer, primary_key=True)

    # Game identification
    week = db.Column(db.Integer, nullable=False)

    # Teams
    home_team = db.Column(db.String(100), nullable=False)
    away_team = db.Column(db.String(100), nullable=False)

    # Point spread added to the home score (positive = home underdog)
    spread = db.Column(db.Float, nullable=False, default=0.0)

    # Game timing
    kickoff_time = db.Column(db.DateTime(timezone=True), nullable=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    picks = db.relationship(
        "Pick", backref="game", lazy="dynamic", cascade="all, delete-orphan"
    )

    # Indexes
    __table_args__ = (
        db.UniqueConstraint(
            "week", "home_team", "away_team", name="unique_week_matchup"
        ),
        db.Index("idx_game_week_kickoff", "week", "kickoff_time"),
        db.CheckConstraint("home_team != away_team", name="different_teams"),
    )

    def __repr__(self):
        return f"<Game {self.away_team} @ {self.home_team} Week {self.week}>"

    @property
    def slot(self):
        """Pick slot of this game under the week's rules"""
        from pickem.utils.rules import rules_for_week

        return rules_for_week(self.week).slot_for(self.kickoff_time)

    def has_started(self, now=None):
        """Check if game has started"""
        from pickem.utils.timezone_utils import has_kickoff_passed

        return has_kickoff_passed(self.kickoff_time, now)

    def is_pickable(self, now=None):
        """Check if game is available for picks (hasn't started yet)"""
        return not self.has_started(now)

    def format_kickoff_local(self, format_str="%a %m/%d at %I:%M %p"):
        """Format kickoff in the application's timezone"""
        from pickem.utils.timezone_utils import format_game_time

        return format_game_time(self.kickoff_time, format_str)

    def to_record(self):
        """Snapshot consumed by the scoring engine"""
        return GameRecord(
            id=self.id,
            week=self.week,
            home_team=self.home_team,
            away_team=self.away_team,
            spread=self.spread or 0.0,
            kickoff=self.kickoff_time,
        )

    @staticmethod
    def get_games_for_week(week):
        """Get all games for a specific week ordered by kickoff"""
        return (
            Game.query.filter_by(week=week)
            .order_by(Game.kickoff_time, Game.id)
            .all()
        )

    def to_dict(self, now=None):
        """Convert game to dictionary for API responses"""
        from pickem.utils.timezone_utils import ensure_utc

        return {
            "id": self.id,
            "week": self.week,
            "homeTeam": self.home_team,
            "awayTeam": self.away_team,
            "spread": self.spread,
            "kickoffTime": ensure_utc(self.kickoff_time).isoformat(),
            "kickoffLocal": self.format_kickoff_local(),
            "slot": self.slot.value,
            "isPickable": self.is_pickable(now),
        }
