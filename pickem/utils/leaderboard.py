"""
Season leaderboard built from weekly scores
"""

from collections import OrderedDict

from pickem.schemas import LeaderboardEntry


def aggregate(weekly_scores, profiles=None):
    """
    Combine weekly scores into ranked standings.

    Sort by total points (descending), then by total correct picks
    (descending). Remaining ties keep encounter order: profiles first, in the
    order given, then users that only appear in the scores. Rank is the
    1-based position, so exact ties still get distinct ranks.

    Args:
        weekly_scores: Iterable of WeeklyScore across any number of weeks
        profiles: Optional iterable of ProfileRecord; every profile gets an entry

    Returns:
        list of LeaderboardEntry
    """
    totals = OrderedDict()

    for profile in profiles or ():
        totals.setdefault(
            profile.email,
            {"display_name": profile.display_name, "correct": 0, "points": 0, "weeks": 0},
        )

    for score in weekly_scores:
        entry = totals.setdefault(
            score.user_id,
            {"display_name": score.user_id, "correct": 0, "points": 0, "weeks": 0},
        )
        entry["correct"] += score.total_correct
        entry["points"] += score.weekly_points
        if score.has_picks:
            entry["weeks"] += 1

    standings = sorted(
        totals.items(),
        key=lambda item: (item[1]["points"], item[1]["correct"]),
        reverse=True,
    )

    return [
        LeaderboardEntry(
            rank=position,
            user_id=user_id,
            display_name=stats["display_name"],
            total_correct=stats["correct"],
            total_points=stats["points"],
            weeks_played=stats["weeks"],
        )
        for position, (user_id, stats) in enumerate(standings, start=1)
    ]


def season_leaderboard(reports, profiles=None):
    """Leaderboard from a list of weekly ScoreReports"""
    return aggregate(
        (score for report in reports for score in report.scores), profiles=profiles
    )
