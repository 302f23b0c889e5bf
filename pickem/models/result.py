from datetime import datetime, timezone

from pickem import db
from pickem.schemas import ResultRecord


class Result(db.Model):
    """Official final score, entered after the game completes"""

    __tablename__ = "results"

    id = db.Column(db.Integer, primary_key=True)
    week = db.Column(db.Integer, nullable=False)

    home_team = db.Column(db.String(100), nullable=False)
    away_team = db.Column(db.String(100), nullable=False)
    home_score = db.Column(db.Integer, nullable=False)
    away_score = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.UniqueConstraint(
            "week", "home_team", "away_team", name="unique_week_result"
        ),
        db.Index("idx_result_week", "week"),
        db.CheckConstraint(
            "home_score >= 0 AND away_score >= 0", name="non_negative_scores"
        ),
    )

    def __repr__(self):
        return (
            f"<Result {self.away_team} {self.away_score} @ "
            f"{self.home_team} {self.home_score} Week {self.week}>"
        )

    def to_record(self):
        return ResultRecord(
            week=self.week,
            home_team=self.home_team,
            away_team=self.away_team,
            home_score=self.home_score,
            away_score=self.away_score,
        )

    @staticmethod
    def get_results_for_week(week):
        return Result.query.filter_by(week=week).order_by(Result.id).all()

    def to_dict(self):
        return {
            "id": self.id,
            "week": self.week,
            "homeTeam": self.home_team,
            "awayTeam": self.away_team,
            "homeScore": self.home_score,
            "awayScore": self.away_score,
        }
