"""Snapshot records consumed and produced by the scoring engine."""

from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pickem.utils.timezone_utils import ensure_utc

GameId = Union[int, str]


def _clean_team(value):
    value = value.strip()
    if not value:
        raise ValueError("team name must not be blank")
    return value


class GameRecord(BaseModel):
    """One scheduled matchup; ``spread`` is added to the home score."""

    model_config = ConfigDict(frozen=True)

    id: GameId
    week: int = Field(ge=1)
    home_team: str
    away_team: str
    spread: float = 0.0
    kickoff: datetime

    @field_validator("home_team", "away_team")
    @classmethod
    def _strip_team(cls, value):
        return _clean_team(value)

    @field_validator("kickoff")
    @classmethod
    def _aware_kickoff(cls, value):
        return ensure_utc(value)

    def has_team(self, team):
        return team in (self.home_team, self.away_team)


class ResultRecord(BaseModel):
    """Official final score, possibly recorded with home/away mirrored."""

    model_config = ConfigDict(frozen=True)

    home_team: str
    away_team: str
    home_score: int = Field(ge=0)
    away_score: int = Field(ge=0)
    week: Optional[int] = Field(default=None, ge=1)

    @field_validator("home_team", "away_team")
    @classmethod
    def _strip_team(cls, value):
        return _clean_team(value)


class PickRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    game_id: GameId
    selected_team: str
    is_lock: bool = False

    @field_validator("user_id")
    @classmethod
    def _strip_user(cls, value):
        value = value.strip()
        if not value:
            raise ValueError("user_id must not be blank")
        return value

    @field_validator("selected_team")
    @classmethod
    def _strip_team(cls, value):
        return _clean_team(value)


class ProfileRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str
    username: Optional[str] = None

    @property
    def display_name(self):
        return self.username or self.email


class WeeklyScore(BaseModel):
    """Per-user tally for one week.

    ``correct`` counts correct picks that were not locks; locks are tallied
    separately. ``unresolved`` and ``dropped`` let callers tell an empty
    week from a losing one.
    """

    user_id: str
    week: int
    correct: int = 0
    lock_correct: int = 0
    lock_incorrect: int = 0
    perfect_bonus: int = 0
    weekly_points: int = 0
    scored: int = 0
    unresolved: int = 0
    dropped: int = 0

    @property
    def total_correct(self):
        return self.correct + self.lock_correct

    @property
    def has_picks(self):
        return (self.scored + self.unresolved + self.dropped) > 0

    def to_dict(self):
        return {
            "userId": self.user_id,
            "week": self.week,
            "correct": self.correct,
            "lockCorrect": self.lock_correct,
            "lockIncorrect": self.lock_incorrect,
            "perfectBonus": self.perfect_bonus,
            "weeklyPoints": self.weekly_points,
            "scored": self.scored,
            "unresolved": self.unresolved,
            "dropped": self.dropped,
        }


class ScoreReport(BaseModel):
    """Scores for one week plus counts of records skipped as inconsistent"""

    week: int
    scores: List[WeeklyScore] = Field(default_factory=list)
    orphaned_picks: int = 0
    unmatched_results: int = 0
    duplicate_picks: int = 0
    duplicate_results: int = 0

    @property
    def skipped_records(self):
        return (
            self.orphaned_picks
            + self.unmatched_results
            + self.duplicate_picks
            + self.duplicate_results
        )

    def score_for(self, user_id):
        for score in self.scores:
            if score.user_id == user_id:
                return score
        return None

    def to_dict(self):
        return {
            "week": self.week,
            "scores": [score.to_dict() for score in self.scores],
            "orphanedPicks": self.orphaned_picks,
            "unmatchedResults": self.unmatched_results,
            "duplicatePicks": self.duplicate_picks,
            "duplicateResults": self.duplicate_results,
        }


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    display_name: str
    total_correct: int = 0
    total_points: int = 0
    weeks_played: int = 0

    def to_dict(self):
        return {
            "rank": self.rank,
            "userId": self.user_id,
            "displayName": self.display_name,
            "totalCorrect": self.total_correct,
            "totalPoints": self.total_points,
            "weeksPlayed": self.weeks_played,
        }


class PickSelection(BaseModel):
    """An in-progress set of picks for one week: game id -> team, plus the lock"""

    model_config = ConfigDict(frozen=True)

    picks: Dict[GameId, str] = Field(default_factory=dict)
    lock: Optional[GameId] = None

    def with_pick(self, game_id, team):
        picks = dict(self.picks)
        picks[game_id] = team
        return PickSelection(picks=picks, lock=self.lock)

    def without_pick(self, game_id):
        picks = {gid: team for gid, team in self.picks.items() if gid != game_id}
        lock = None if self.lock == game_id else self.lock
        return PickSelection(picks=picks, lock=lock)

    def with_lock(self, game_id):
        return PickSelection(picks=dict(self.picks), lock=game_id)

    def to_dict(self):
        return {
            "picks": {str(gid): team for gid, team in self.picks.items()},
            "lock": self.lock,
        }
