"""
Outcome resolution against the spread

The spread is added to the home score before comparing with the away score.
A spread-adjusted tie is a push and both teams count as covering.
"""

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from pickem.utils.errors import MalformedInputError


class CoveringSide(str, enum.Enum):
    HOME = "HOME"
    AWAY = "AWAY"
    PUSH = "PUSH"
    UNRESOLVED = "UNRESOLVED"


class Outcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    side: CoveringSide
    home_team: str
    away_team: str
    covering_team: Optional[str] = None

    @property
    def resolved(self):
        return self.side is not CoveringSide.UNRESOLVED

    @property
    def is_push(self):
        return self.side is CoveringSide.PUSH

    def covers(self, team):
        """Whether a pick on ``team`` is correct"""
        if self.side is CoveringSide.UNRESOLVED:
            return False
        team = team.strip()
        if self.side is CoveringSide.PUSH:
            return team in (self.home_team, self.away_team)
        return team == self.covering_team


def unresolved(game):
    return Outcome(
        side=CoveringSide.UNRESOLVED, home_team=game.home_team, away_team=game.away_team
    )


def orient_scores(game, result):
    """Return (home_score, away_score) from the game's point of view

    Returns None when the result is not for this game. A result recorded
    with home and away mirrored is flipped back.
    """
    if result.week is not None and result.week != game.week:
        return None

    if (result.home_team, result.away_team) == (game.home_team, game.away_team):
        return result.home_score, result.away_score
    if (result.home_team, result.away_team) == (game.away_team, game.home_team):
        return result.away_score, result.home_score
    return None


def match_result(game, results):
    """Find the result for a game, preferring an exact home/away match"""
    mirrored = None
    for result in results:
        if result.week is not None and result.week != game.week:
            continue
        if (result.home_team, result.away_team) == (game.home_team, game.away_team):
            return result
        if mirrored is None and (result.home_team, result.away_team) == (
            game.away_team,
            game.home_team,
        ):
            mirrored = result
    return mirrored


def resolve(game, result):
    """
    Determine which side covered.

    Args:
        game: GameRecord (teams and spread)
        result: ResultRecord for the game, or None if not final yet

    Returns:
        Outcome; UNRESOLVED when there is no result
    """
    if result is None:
        return unresolved(game)

    scores = orient_scores(game, result)
    if scores is None:
        raise MalformedInputError(
            f"Result {result.away_team} @ {result.home_team} does not belong to "
            f"game {game.id}"
        )

    home_score, away_score = scores
    adjusted_home = home_score + game.spread

    if adjusted_home > away_score:
        return Outcome(
            side=CoveringSide.HOME,
            home_team=game.home_team,
            away_team=game.away_team,
            covering_team=game.home_team,
        )
    if adjusted_home < away_score:
        return Outcome(
            side=CoveringSide.AWAY,
            home_team=game.home_team,
            away_team=game.away_team,
            covering_team=game.away_team,
        )
    return Outcome(
        side=CoveringSide.PUSH, home_team=game.home_team, away_team=game.away_team
    )
